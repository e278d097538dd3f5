"""In-memory stand-ins for the S3 backend and remote HTTP sources."""

from __future__ import annotations

from io import BytesIO
from types import SimpleNamespace
from typing import Any
from urllib.parse import unquote

import httpx
from minio.error import S3Error
from PIL import Image
from urllib3.exceptions import MaxRetryError

from src.mediahub.config import MediaLimits, StorageOptions
from src.mediahub.storage.object_store import S3ObjectStore

BASE_URL = "https://test-bucket.s3.amazonaws.com"
BASE_PATH = "test-base-path"
BUCKET = "test-bucket"


class FakeS3Error(S3Error):
    """S3Error carrying only a code, as raised by the SDK."""

    def __init__(self, code: str, object_name: str = "") -> None:
        Exception.__init__(self, f"{code}: {object_name}")
        self._fake_code = code
        self._fake_object_name = object_name

    @property
    def code(self) -> str:
        return self._fake_code

    def __str__(self) -> str:
        return f"{self._fake_code}: {self._fake_object_name}"


class FakeMinio:
    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.put_calls: list[dict[str, Any]] = []
        self.copy_calls: list[tuple[str, str]] = []
        self.removed: list[str] = []
        self.fail_put: set[str] = set()
        self.fail_copy: set[str] = set()
        self.fail_stat_code: str | None = None
        self.strict_remove = False
        self.unreachable = False

    def _connect(self, object_name: str) -> None:
        if self.unreachable:
            raise MaxRetryError(None, f"/{BUCKET}/{object_name}", reason="connection refused")

    def stat_object(self, bucket_name: str, object_name: str, **kwargs: Any) -> SimpleNamespace:
        self._connect(object_name)
        if self.fail_stat_code:
            raise FakeS3Error(self.fail_stat_code, object_name)
        if object_name not in self.objects:
            raise FakeS3Error("NoSuchKey", object_name)
        return SimpleNamespace(object_name=object_name, size=len(self.objects[object_name]))

    def put_object(
        self,
        bucket_name: str,
        object_name: str,
        data: BytesIO,
        length: int,
        content_type: str = "application/octet-stream",
        metadata: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> SimpleNamespace:
        self._connect(object_name)
        if object_name in self.fail_put:
            raise FakeS3Error("AccessDenied", object_name)
        payload = data.read(length)
        self.objects[object_name] = payload
        self.put_calls.append(
            {
                "bucket_name": bucket_name,
                "object_name": object_name,
                "payload": payload,
                "length": length,
                "content_type": content_type,
                "metadata": metadata,
            }
        )
        return SimpleNamespace(etag="test-etag", version_id="test-version-id")

    def copy_object(self, bucket_name: str, object_name: str, source: Any, **kwargs: Any) -> None:
        self._connect(object_name)
        if source.object_name in self.fail_copy:
            raise FakeS3Error("AccessDenied", source.object_name)
        if source.object_name not in self.objects:
            raise FakeS3Error("NoSuchKey", source.object_name)
        self.objects[object_name] = self.objects[source.object_name]
        self.copy_calls.append((source.object_name, object_name))

    def remove_object(self, bucket_name: str, object_name: str, **kwargs: Any) -> None:
        self._connect(object_name)
        if object_name not in self.objects and self.strict_remove:
            raise FakeS3Error("NoSuchKey", object_name)
        self.objects.pop(object_name, None)
        self.removed.append(object_name)


class FakeWeb:
    """Serves remote URLs and the fake bucket's public URLs over MockTransport."""

    def __init__(self, minio: FakeMinio | None = None) -> None:
        self.minio = minio
        self.remote: dict[str, bytes] = {}
        self.streams: dict[str, list[bytes]] = {}
        self.served_chunks: list[int] = []
        self.requests: list[str] = []
        self.clients: list[httpx.AsyncClient] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        if url in self.streams:
            return httpx.Response(
                200,
                content=self._stream(self.streams[url]),
                headers={"Content-Type": "image/png"},
            )
        if url in self.remote:
            return httpx.Response(
                200,
                content=self.remote[url],
                headers={"Content-Type": "image/png; charset=binary"},
            )
        prefix = BASE_URL + "/"
        if self.minio is not None and url.startswith(prefix):
            name = unquote(url[len(prefix):])
            if name in self.minio.objects:
                return httpx.Response(200, content=self.minio.objects[name])
        return httpx.Response(404)

    async def _stream(self, chunks: list[bytes]):
        for chunk in chunks:
            self.served_chunks.append(len(chunk))
            yield chunk

    def client_factory(self) -> httpx.AsyncClient:
        client = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
        self.clients.append(client)
        return client


def make_options(**overrides: Any) -> StorageOptions:
    values: dict[str, Any] = {
        "endpoint": "s3.amazonaws.com",
        "bucket": BUCKET,
        "storage_base_url": BASE_URL,
        "access_key": "test-access-key",
        "secret_key": "test-secret-key",
        "use_ssl": True,
        "base_path": BASE_PATH,
        "default_acl": "fake-acl",
    }
    values.update(overrides)
    return StorageOptions(**values)


def make_store(
    minio: FakeMinio,
    web: FakeWeb | None = None,
    *,
    limits: MediaLimits | None = None,
    **overrides: Any,
) -> S3ObjectStore:
    return S3ObjectStore(
        options=make_options(**overrides),
        client=minio,  # type: ignore[arg-type]
        limits=limits or MediaLimits(chunk_size_bytes=1024),
        http_client_factory=web.client_factory if web is not None else None,
    )


def make_image_bytes(
    size: tuple[int, int] = (64, 32),
    color: tuple[int, ...] = (200, 30, 30),
    *,
    mode: str = "RGB",
    fmt: str = "PNG",
) -> bytes:
    buffer = BytesIO()
    Image.new(mode, size, color).save(buffer, format=fmt)
    return buffer.getvalue()
