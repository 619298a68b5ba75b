"""Core module - Configuration, logging and exceptions."""

from objectstore.core.config import Settings, get_settings
from objectstore.core.exceptions import (
    BackendUnavailableError,
    InvalidArgumentError,
    ObjectNotFoundError,
    ObjectStorageError,
    PermissionDeniedError,
)

__all__ = [
    "Settings",
    "get_settings",
    "ObjectStorageError",
    "ObjectNotFoundError",
    "BackendUnavailableError",
    "PermissionDeniedError",
    "InvalidArgumentError",
]
