"""
Custom exceptions for objectstore.

All exceptions inherit from ObjectStorageError and carry an error code, a
process exit code and error details so the command line can report them
consistently.
"""

from typing import Any


class ObjectStorageError(Exception):
    """Base exception for all storage errors."""

    exit_code: int = 1
    error_code: str = "STORAGE_ERROR"
    message: str = "Storage operation failed"

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
        exit_code: int | None = None,
        error_code: str | None = None,
    ) -> None:
        self.message = message or self.message
        self.details = details or {}
        if exit_code is not None:
            self.exit_code = exit_code
        if error_code is not None:
            self.error_code = error_code
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for command output."""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }


# =============================================================================
# Resource Errors
# =============================================================================


class ObjectNotFoundError(ObjectStorageError):
    """Raised when a key or its container does not exist."""

    exit_code = 2
    error_code = "NOT_FOUND"
    message = "Object not found"

    def __init__(
        self,
        key: str,
        backend: str | None = None,
        message: str | None = None,
    ) -> None:
        super().__init__(
            message=message or f"Object '{key}' not found",
            details={"key": key, "backend": backend},
        )
        self.key = key


# =============================================================================
# Backend Errors
# =============================================================================


class BackendUnavailableError(ObjectStorageError):
    """Raised on network, endpoint, credential or cluster failures."""

    exit_code = 3
    error_code = "BACKEND_UNAVAILABLE"
    message = "Storage backend is unavailable"


class PermissionDeniedError(ObjectStorageError):
    """Raised when the remote system rejects the credentials or ACL."""

    exit_code = 4
    error_code = "PERMISSION_DENIED"
    message = "Permission denied by storage backend"


# =============================================================================
# Validation Errors
# =============================================================================


class InvalidArgumentError(ObjectStorageError):
    """Raised when configuration or a key is rejected before any I/O."""

    exit_code = 5
    error_code = "INVALID_ARGUMENT"
    message = "Invalid argument"
