"""
Storage backend factory.

Creates the appropriate storage backend based on configuration.
"""

from pathlib import Path
from typing import Any

from objectstore.core.config import Settings, get_settings
from objectstore.core.exceptions import InvalidArgumentError
from objectstore.storage.base import StorageBackend
from objectstore.storage.local import LocalStorageBackend

BACKEND_TYPES = ("local", "s3", "gcs", "etcd")

# Singleton instance
_storage_backend: StorageBackend | None = None


def get_storage_backend(settings: Settings | None = None) -> StorageBackend:
    """
    Get the configured storage backend.

    Factory function that creates the appropriate storage backend
    based on application settings. Uses singleton pattern for caching.

    Args:
        settings: Application settings. Uses default if None.

    Returns:
        Configured StorageBackend instance.

    Raises:
        InvalidArgumentError: If storage backend type is invalid or misconfigured.
    """
    global _storage_backend

    if _storage_backend is not None:
        return _storage_backend

    if settings is None:
        settings = get_settings()

    _storage_backend = build_storage_backend(settings)
    return _storage_backend


def reset_storage_backend() -> None:
    """Reset the storage backend singleton (for testing)."""
    global _storage_backend
    _storage_backend = None


def build_storage_backend(settings: Settings) -> StorageBackend:
    """Create a new backend from settings, bypassing the singleton."""
    if settings.storage_backend == "local":
        # The prefix is a subdirectory of the root
        root_dir = Path(settings.local_storage_path)
        if settings.storage_prefix:
            root_dir = root_dir / settings.storage_prefix
        return create_storage_backend("local", root_dir=root_dir)

    if settings.storage_backend == "s3":
        if not settings.s3_bucket_name:
            raise InvalidArgumentError(message="S3 storage requires S3_BUCKET_NAME to be set")
        return create_storage_backend(
            "s3",
            bucket_name=settings.s3_bucket_name,
            prefix=settings.storage_prefix,
            region=settings.s3_region,
            endpoint_url=settings.s3_endpoint_url,
            sse=settings.s3_sse,
            access_key=settings.s3_access_key,
            secret_key=settings.s3_secret_key,
        )

    if settings.storage_backend == "gcs":
        if not settings.gcs_bucket_name:
            raise InvalidArgumentError(message="GCS storage requires GCS_BUCKET_NAME to be set")
        return create_storage_backend(
            "gcs",
            bucket_name=settings.gcs_bucket_name,
            prefix=settings.storage_prefix,
            credentials_file=settings.gcs_credentials_file,
            project=settings.gcs_project,
        )

    if settings.storage_backend == "etcd":
        return create_storage_backend(
            "etcd",
            endpoints=settings.etcd_endpoints,
            namespace=settings.resolve_etcd_namespace(),
            ssl_enabled=settings.etcd_ssl_enabled,
            ssl_ca=settings.etcd_ssl_ca,
            ssl_cert=settings.etcd_ssl_cert,
            ssl_key=settings.etcd_ssl_key,
            ssl_verify=settings.etcd_ssl_verify,
            timeout=settings.etcd_timeout,
        )

    raise InvalidArgumentError(
        message=f"Unknown storage backend: {settings.storage_backend}",
        details={"supported": list(BACKEND_TYPES)},
    )


def create_storage_backend(
    backend_type: str,
    **kwargs: Any,
) -> StorageBackend:
    """
    Create a storage backend with custom configuration.

    Cloud adapters are imported lazily so their SDKs are only loaded when
    selected.

    Args:
        backend_type: One of "local", "s3", "gcs" or "etcd".
        **kwargs: Backend-specific constructor arguments.

    Returns:
        Configured StorageBackend instance.
    """
    if backend_type == "local":
        return LocalStorageBackend(**kwargs)

    elif backend_type == "s3":
        from objectstore.storage.s3 import S3StorageBackend

        return S3StorageBackend(**kwargs)

    elif backend_type == "gcs":
        from objectstore.storage.gcs import GCSStorageBackend

        return GCSStorageBackend(**kwargs)

    elif backend_type == "etcd":
        from objectstore.storage.etcd import EtcdStorageBackend

        return EtcdStorageBackend(**kwargs)

    else:
        raise InvalidArgumentError(
            message=f"Unknown storage backend: {backend_type}",
            details={"supported": list(BACKEND_TYPES)},
        )
