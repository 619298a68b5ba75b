"""
S3/MinIO storage backend.

Implements StorageBackend for Amazon S3 and S3-compatible services (MinIO, etc.).
"""

from typing import Any

import aioboto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

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

NOT_FOUND_CODES = frozenset({"NoSuchKey", "404", "NotFound"})
DENIED_CODES = frozenset({"AccessDenied", "403", "Forbidden", "InvalidAccessKeyId"})


def _translate_client_error(e: Exception, key: str, bucket: str) -> Exception:
    """Map a botocore error onto the storage error taxonomy."""
    if isinstance(e, ClientError):
        code = e.response.get("Error", {}).get("Code", "")
        if code in NOT_FOUND_CODES:
            return ObjectNotFoundError(key, backend="s3")
        if code in DENIED_CODES:
            return PermissionDeniedError(
                message=f"S3 access denied: {e}",
                details={"key": key, "bucket": bucket, "code": code},
            )
        return BackendUnavailableError(
            message=f"S3 request failed: {e}",
            details={"key": key, "bucket": bucket, "code": code},
        )
    return BackendUnavailableError(
        message=f"S3 request failed: {e}",
        details={"key": key, "bucket": bucket},
    )


class S3StorageBackend(StorageBackend):
    """S3/MinIO storage implementation."""

    def __init__(
        self,
        bucket_name: str,
        prefix: str = "",
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        sse: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
    ) -> None:
        """
        Initialize S3 storage backend.

        Args:
            bucket_name: S3 bucket name.
            prefix: Key prefix inside the bucket.
            region: AWS region.
            endpoint_url: Custom endpoint URL (for MinIO/self-hosted).
            sse: Server-side encryption algorithm attached to every write.
            access_key: AWS access key ID. Default credential chain if None.
            secret_key: AWS secret access key.
        """
        self.bucket_name = bucket_name
        self.prefix = clean_prefix(prefix)
        self.region = region
        self.endpoint_url = endpoint_url or None
        self.sse = sse or None

        self.session = aioboto3.Session(
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            region_name=region,
        )

        # Custom endpoints get path-style addressing
        self.client_config = BotoConfig(
            signature_version="s3v4",
            s3={"addressing_style": "path" if self.endpoint_url else "auto"},
        )

    @property
    def backend_name(self) -> str:
        return "s3"

    async def _get_client(self) -> Any:
        """Get S3 client context manager."""
        use_ssl = not (self.endpoint_url or "").startswith("http://")
        return self.session.client(
            "s3",
            endpoint_url=self.endpoint_url,
            use_ssl=use_ssl,
            config=self.client_config,
        )

    def _object_key(self, key: str) -> str:
        return join_object_path(self.prefix, key)

    async def list_objects(self, prefix: str = "") -> list[Object]:
        """List objects one level below the prefix, following markers."""
        prefix = join_object_path(self.prefix, prefix)
        params: dict[str, Any] = {
            "Bucket": self.bucket_name,
            "Prefix": f"{prefix}/" if prefix else "",
        }
        objects: list[Object] = []

        try:
            async with await self._get_client() as client:
                while True:
                    result = await client.list_objects(**params)
                    contents = result.get("Contents", [])
                    for entry in contents:
                        path = remove_prefix_from_object_path(prefix, entry["Key"])
                        if object_path_is_invalid(path):
                            continue
                        objects.append(
                            Object(
                                path=path,
                                data=b"",
                                last_modified=entry["LastModified"],
                            )
                        )
                    if not result.get("IsTruncated") or not contents:
                        break
                    params["Marker"] = contents[-1]["Key"]

        except (ClientError, BotoCoreError) as e:
            error = _translate_client_error(e, prefix, self.bucket_name)
            if isinstance(error, ObjectNotFoundError):
                # A missing bucket is a misconfigured backend, not an empty prefix
                error = BackendUnavailableError(
                    message=f"S3 bucket unavailable: {e}",
                    details={"prefix": prefix, "bucket": self.bucket_name},
                )
            raise error from e

        logger.debug("objects_listed", backend="s3", prefix=prefix, count=len(objects))
        return objects

    async def get_object(self, key: str) -> Object:
        """Download an object from S3."""
        try:
            async with await self._get_client() as client:
                response = await client.get_object(
                    Bucket=self.bucket_name,
                    Key=self._object_key(key),
                )
                async with response["Body"] as stream:
                    content = await stream.read()

        except (ClientError, BotoCoreError) as e:
            raise _translate_client_error(e, key, self.bucket_name) from e

        logger.debug("object_fetched", backend="s3", key=key, size=len(content))
        return Object(
            path=key,
            data=content,
            last_modified=response["LastModified"],
        )

    async def put_object(self, key: str, data: bytes) -> None:
        """Upload an object to S3."""
        extra_args: dict[str, Any] = {}
        if self.sse:
            extra_args["ServerSideEncryption"] = self.sse

        try:
            async with await self._get_client() as client:
                await client.put_object(
                    Bucket=self.bucket_name,
                    Key=self._object_key(key),
                    Body=data,
                    **extra_args,
                )

        except (ClientError, BotoCoreError) as e:
            raise _translate_client_error(e, key, self.bucket_name) from e

        logger.debug("object_stored", backend="s3", key=key, size=len(data))

    async def delete_object(self, key: str) -> None:
        """Delete an object from S3, failing if it does not exist."""
        object_key = self._object_key(key)

        try:
            async with await self._get_client() as client:
                # delete_object does not fail on missing keys; head_object raises 404
                await client.head_object(Bucket=self.bucket_name, Key=object_key)
                await client.delete_object(Bucket=self.bucket_name, Key=object_key)

        except (ClientError, BotoCoreError) as e:
            raise _translate_client_error(e, key, self.bucket_name) from e

        logger.debug("object_deleted", backend="s3", key=key)
