"""
Pytest configuration and fixtures.

Cloud backends run against in-memory fakes of their SDK clients.
"""

from datetime import datetime, timezone
from pathlib import Path

import pytest
from botocore.exceptions import ClientError
from etcd3gw.exceptions import Etcd3Exception
from google.api_core.exceptions import NotFound

from objectstore.core.config import Settings
from objectstore.storage.etcd import EtcdStorageBackend
from objectstore.storage.factory import reset_storage_backend
from objectstore.storage.gcs import GCSStorageBackend
from objectstore.storage.local import LocalStorageBackend
from objectstore.storage.s3 import S3StorageBackend

TEST_PREFIX = "unittest/20240101000000"


def client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


# =============================================================================
# S3
# =============================================================================


class FakeBody:
    def __init__(self, data: bytes) -> None:
        self.data = data

    async def __aenter__(self) -> "FakeBody":
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None

    async def read(self) -> bytes:
        return self.data


class FakeS3Client:
    """In-memory stand-in for an aioboto3 S3 client."""

    def __init__(self, bucket: str, page_size: int = 1000) -> None:
        self.bucket = bucket
        self.page_size = page_size
        self.objects: dict[str, tuple[bytes, datetime]] = {}
        self.list_calls: list[dict] = []
        self.put_calls: list[dict] = []
        self.error_code: str | None = None

    async def __aenter__(self) -> "FakeS3Client":
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None

    def _check(self, bucket: str, operation: str) -> None:
        if self.error_code:
            raise client_error(self.error_code, operation)
        if bucket != self.bucket:
            raise client_error("NoSuchBucket", operation)

    async def list_objects(self, Bucket: str, Prefix: str = "", Marker: str | None = None):
        self.list_calls.append({"Prefix": Prefix, "Marker": Marker})
        self._check(Bucket, "ListObjects")
        keys = sorted(k for k in self.objects if k.startswith(Prefix))
        if Marker is not None:
            keys = [k for k in keys if k > Marker]
        page = keys[: self.page_size]
        return {
            "Contents": [{"Key": k, "LastModified": self.objects[k][1]} for k in page],
            "IsTruncated": len(keys) > self.page_size,
        }

    async def get_object(self, Bucket: str, Key: str):
        self._check(Bucket, "GetObject")
        if Key not in self.objects:
            raise client_error("NoSuchKey", "GetObject")
        data, modified = self.objects[Key]
        return {"Body": FakeBody(data), "LastModified": modified}

    async def head_object(self, Bucket: str, Key: str):
        self._check(Bucket, "HeadObject")
        if Key not in self.objects:
            raise client_error("404", "HeadObject")
        return {"ContentLength": len(self.objects[Key][0])}

    async def put_object(self, Bucket: str, Key: str, Body: bytes, **kwargs):
        self._check(Bucket, "PutObject")
        self.put_calls.append({"Key": Key, **kwargs})
        self.objects[Key] = (Body, datetime.now(timezone.utc))
        return {}

    async def delete_object(self, Bucket: str, Key: str):
        self._check(Bucket, "DeleteObject")
        self.objects.pop(Key, None)
        return {}


@pytest.fixture
def fake_s3() -> FakeS3Client:
    return FakeS3Client("test-bucket")


@pytest.fixture
def s3_backend(fake_s3: FakeS3Client) -> S3StorageBackend:
    backend = S3StorageBackend(bucket_name="test-bucket", prefix=f"/{TEST_PREFIX}/")

    async def get_client() -> FakeS3Client:
        return fake_s3

    backend._get_client = get_client
    return backend


# =============================================================================
# Google Cloud Storage
# =============================================================================


class FakeBlob:
    def __init__(self, client: "FakeGCSClient", name: str) -> None:
        self.client = client
        self.name = name
        self.updated: datetime | None = None

    def reload(self) -> None:
        if self.name not in self.client.blobs:
            raise NotFound(f"No such object: {self.name}")
        self.updated = self.client.blobs[self.name][1]

    def download_as_bytes(self) -> bytes:
        if self.name not in self.client.blobs:
            raise NotFound(f"No such object: {self.name}")
        return self.client.blobs[self.name][0]

    def upload_from_string(self, data: bytes) -> None:
        self.client.blobs[self.name] = (data, datetime.now(timezone.utc))

    def delete(self) -> None:
        if self.name not in self.client.blobs:
            raise NotFound(f"No such object: {self.name}")
        del self.client.blobs[self.name]


class FakeBucket:
    def __init__(self, client: "FakeGCSClient", name: str) -> None:
        self.client = client
        self.name = name

    def blob(self, name: str) -> FakeBlob:
        return FakeBlob(self.client, name)


class FakeGCSClient:
    """In-memory stand-in for google.cloud.storage.Client."""

    def __init__(self, bucket: str) -> None:
        self.bucket_name = bucket
        self.blobs: dict[str, tuple[bytes, datetime]] = {}
        self.list_prefixes: list[str | None] = []

    def bucket(self, name: str) -> FakeBucket:
        return FakeBucket(self, name)

    def list_blobs(self, bucket_name: str, prefix: str | None = None):
        self.list_prefixes.append(prefix)
        if bucket_name != self.bucket_name:
            raise NotFound(f"No such bucket: {bucket_name}")
        for name in sorted(self.blobs):
            if prefix and not name.startswith(prefix):
                continue
            blob = FakeBlob(self, name)
            blob.updated = self.blobs[name][1]
            yield blob


@pytest.fixture
def fake_gcs() -> FakeGCSClient:
    return FakeGCSClient("test-bucket")


@pytest.fixture
def gcs_backend(fake_gcs: FakeGCSClient) -> GCSStorageBackend:
    return GCSStorageBackend(bucket_name="test-bucket", prefix=TEST_PREFIX, client=fake_gcs)


# =============================================================================
# etcd
# =============================================================================


class FakeEtcdClient:
    """In-memory stand-in for an etcd3gw client."""

    def __init__(self, healthy: bool = True) -> None:
        self.healthy = healthy
        self.store: dict[str, bytes] = {}

    def status(self) -> dict:
        if not self.healthy:
            raise Etcd3Exception("connection refused")
        return {"header": {"cluster_id": "1"}, "version": "3.5.0"}

    def get(self, key: str) -> list[bytes]:
        if key in self.store:
            return [self.store[key]]
        return []

    def put(self, key: str, value: bytes) -> bool:
        self.store[key] = value
        return True

    def delete(self, key: str) -> bool:
        return self.store.pop(key, None) is not None

    def get_prefix(self, key_prefix: str) -> list[tuple[bytes, dict]]:
        return [
            (self.store[k], {"key": k.encode("utf-8"), "mod_revision": "1"})
            for k in sorted(self.store)
            if k.startswith(key_prefix)
        ]


@pytest.fixture
def fake_etcd() -> FakeEtcdClient:
    return FakeEtcdClient()


@pytest.fixture
def etcd_backend(fake_etcd: FakeEtcdClient) -> EtcdStorageBackend:
    return EtcdStorageBackend(
        endpoints=["localhost:2379"],
        namespace="/objectstore/development/",
        client=fake_etcd,
    )


# =============================================================================
# Local filesystem and settings
# =============================================================================


@pytest.fixture
def local_root(tmp_path: Path) -> Path:
    return tmp_path / "storage"


@pytest.fixture
def local_backend(local_root: Path) -> LocalStorageBackend:
    return LocalStorageBackend(local_root)


@pytest.fixture(params=["local", "s3", "gcs", "etcd"])
def backend(request):
    """Every backend, for contract tests."""
    return request.getfixturevalue(f"{request.param}_backend")


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        app_env="development",
        storage_backend="local",
        local_storage_path=str(tmp_path / "storage"),
        log_format="console",
    )


@pytest.fixture(autouse=True)
def reset_backend_singleton():
    reset_storage_backend()
    yield
    reset_storage_backend()
