"""Storage abstraction over the local filesystem, S3, GCS and etcd."""

from objectstore.storage.base import StorageBackend
from objectstore.storage.diff import ObjectSliceDiff, get_object_slice_diff
from objectstore.storage.factory import create_storage_backend, get_storage_backend
from objectstore.storage.objects import Metadata, Object
from objectstore.storage.watch import watch_objects

__all__ = [
    "StorageBackend",
    "Object",
    "Metadata",
    "ObjectSliceDiff",
    "get_object_slice_diff",
    "get_storage_backend",
    "create_storage_backend",
    "watch_objects",
]
