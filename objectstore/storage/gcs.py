"""
Google Cloud Storage backend.

Implements StorageBackend for a GCS bucket. The google-cloud-storage client
is blocking, so every call runs in the default executor.
"""

import asyncio
from collections.abc import Callable
from functools import partial
from typing import Any, TypeVar

import requests
from google.api_core import exceptions as gapi_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import storage

from objectstore.core.exceptions import (
    BackendUnavailableError,
    ObjectNotFoundError,
    PermissionDeniedError,
)
from objectstore.core.logging import get_logger
from objectstore.storage.base import StorageBackend
from objectstore.storage.objects import (
    Object,
    clean_prefix,
    join_object_path,
    object_path_is_invalid,
    remove_prefix_from_object_path,
)

logger = get_logger(__name__)

T = TypeVar("T")

GCS_ERRORS = (
    gapi_exceptions.GoogleAPIError,
    auth_exceptions.GoogleAuthError,
    requests.RequestException,
)


def _translate_google_error(e: Exception, key: str, bucket: str) -> Exception:
    """Map a Google API error onto the storage error taxonomy."""
    if isinstance(e, gapi_exceptions.NotFound):
        return ObjectNotFoundError(key, backend="gcs")
    if isinstance(e, (gapi_exceptions.Forbidden, gapi_exceptions.Unauthorized)):
        return PermissionDeniedError(
            message=f"GCS access denied: {e}",
            details={"key": key, "bucket": bucket},
        )
    return BackendUnavailableError(
        message=f"GCS request failed: {e}",
        details={"key": key, "bucket": bucket},
    )


class GCSStorageBackend(StorageBackend):
    """Google Cloud Storage implementation."""

    def __init__(
        self,
        bucket_name: str,
        prefix: str = "",
        credentials_file: str | None = None,
        project: str | None = None,
        client: storage.Client | None = None,
    ) -> None:
        """
        Initialize GCS storage backend.

        Args:
            bucket_name: GCS bucket name.
            prefix: Object name prefix inside the bucket.
            credentials_file: Service account JSON file. Application default
                credentials are used if None.
            project: GCP project id.
            client: Pre-built client, mainly for tests.
        """
        self.bucket_name = bucket_name
        self.prefix = clean_prefix(prefix)

        if client is None:
            try:
                if credentials_file:
                    client = storage.Client.from_service_account_json(
                        credentials_file, project=project
                    )
                else:
                    client = storage.Client(project=project)
            except GCS_ERRORS as e:
                raise BackendUnavailableError(
                    message=f"Unable to create GCS client: {e}",
                    details={"bucket": bucket_name},
                ) from e

        self.client = client
        self.bucket = client.bucket(bucket_name)

    @property
    def backend_name(self) -> str:
        return "gcs"

    async def _run(self, func: Callable[..., T], *args: Any) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, *args))

    def _blob_name(self, key: str) -> str:
        return join_object_path(self.prefix, key)

    def _list_entries(self, prefix: str) -> list[Object]:
        objects: list[Object] = []
        blobs = self.client.list_blobs(
            self.bucket_name, prefix=f"{prefix}/" if prefix else None
        )
        # The iterator fetches further pages lazily until exhausted
        for blob in blobs:
            path = remove_prefix_from_object_path(prefix, blob.name)
            if object_path_is_invalid(path):
                continue
            objects.append(Object(path=path, data=b"", last_modified=blob.updated))
        return objects

    def _download(self, key: str) -> Object:
        blob = self.bucket.blob(self._blob_name(key))
        blob.reload()
        content = blob.download_as_bytes()
        return Object(path=key, data=content, last_modified=blob.updated)

    def _upload(self, key: str, data: bytes) -> None:
        blob = self.bucket.blob(self._blob_name(key))
        blob.upload_from_string(data)

    def _delete(self, key: str) -> None:
        self.bucket.blob(self._blob_name(key)).delete()

    async def list_objects(self, prefix: str = "") -> list[Object]:
        """List objects one level below the prefix."""
        prefix = join_object_path(self.prefix, prefix)

        try:
            objects = await self._run(self._list_entries, prefix)
        except GCS_ERRORS as e:
            error = _translate_google_error(e, prefix, self.bucket_name)
            if isinstance(error, ObjectNotFoundError):
                # Only the bucket itself can be missing during a list
                error = BackendUnavailableError(
                    message=f"GCS bucket unavailable: {e}",
                    details={"prefix": prefix, "bucket": self.bucket_name},
                )
            raise error from e

        logger.debug("objects_listed", backend="gcs", prefix=prefix, count=len(objects))
        return objects

    async def get_object(self, key: str) -> Object:
        """Download an object from GCS."""
        try:
            obj = await self._run(self._download, key)
        except GCS_ERRORS as e:
            raise _translate_google_error(e, key, self.bucket_name) from e

        logger.debug("object_fetched", backend="gcs", key=key, size=len(obj.data))
        return obj

    async def put_object(self, key: str, data: bytes) -> None:
        """Upload an object to GCS."""
        try:
            await self._run(self._upload, key, data)
        except GCS_ERRORS as e:
            raise _translate_google_error(e, key, self.bucket_name) from e

        logger.debug("object_stored", backend="gcs", key=key, size=len(data))

    async def delete_object(self, key: str) -> None:
        """Delete an object from GCS."""
        try:
            await self._run(self._delete, key)
        except GCS_ERRORS as e:
            raise _translate_google_error(e, key, self.bucket_name) from e

        logger.debug("object_deleted", backend="gcs", key=key)
