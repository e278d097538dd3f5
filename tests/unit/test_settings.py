from __future__ import annotations

import pytest

from src.mediahub.config import DEFAULT_MAX_FILE_SIZE, MediaSettings
from src.mediahub.services.container import build_media_service

pytestmark = pytest.mark.unit


def test_settings_read_prefixed_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MEDIAHUB_BUCKET", "photos")
    monkeypatch.setenv("MEDIAHUB_BASE_PATH", "uploads")
    monkeypatch.setenv("MEDIAHUB_DEFAULT_ACL", "public-read")
    monkeypatch.setenv("MEDIAHUB_MAX_FILE_SIZE_BYTES", "2048")

    settings = MediaSettings()
    options = settings.storage_options()

    assert options.bucket == "photos"
    assert options.base_path == "uploads"
    assert options.default_acl == "public-read"
    assert settings.limits().max_file_size_bytes == 2048


def test_defaults_cap_at_ten_megabytes_without_acl(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MEDIAHUB_DEFAULT_ACL", raising=False)
    monkeypatch.delenv("MEDIAHUB_MAX_FILE_SIZE_BYTES", raising=False)

    settings = MediaSettings()

    assert settings.limits().max_file_size_bytes == DEFAULT_MAX_FILE_SIZE == 10 * 1024 * 1024
    assert settings.storage_options().default_acl is None
    assert settings.thumbnail_options().size == 500
    assert settings.thumbnail_options().quality == 80


def test_empty_acl_is_treated_as_unset() -> None:
    assert MediaSettings(default_acl="").storage_options().default_acl is None


def test_build_media_service_wires_configured_store() -> None:
    settings = MediaSettings(
        bucket="photos",
        base_path="uploads",
        storage_base_url="https://cdn.example.com",
    )

    service = build_media_service(settings)
    store = service.pipeline.store

    assert store.build_url("a.png") == "https://cdn.example.com/uploads/a.png"
    assert service.pipeline.limits.max_file_size_bytes == DEFAULT_MAX_FILE_SIZE
