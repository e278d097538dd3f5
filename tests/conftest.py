from __future__ import annotations

import os

os.environ.setdefault("MEDIAHUB_BUCKET", "test-bucket")
os.environ.setdefault("MEDIAHUB_STORAGE_BASE_URL", "https://test-bucket.s3.amazonaws.com")
