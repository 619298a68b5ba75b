"""
Local filesystem storage backend.

Implements StorageBackend on top of a directory tree. Keys map to paths
relative to a root directory resolved at construction.
"""

from datetime import datetime, timezone
from pathlib import Path

import aiofiles
import aiofiles.os

from objectstore.core.exceptions import (
    BackendUnavailableError,
    InvalidArgumentError,
    ObjectNotFoundError,
    PermissionDeniedError,
)
from objectstore.core.logging import get_logger
from objectstore.storage.base import StorageBackend
from objectstore.storage.objects import Object, join_object_path

logger = get_logger(__name__)


def _translate_os_error(e: OSError, key: str) -> Exception:
    """Map a filesystem error onto the storage error taxonomy."""
    if isinstance(e, FileNotFoundError):
        return ObjectNotFoundError(key, backend="local")
    if isinstance(e, PermissionError):
        return PermissionDeniedError(
            message=f"Permission denied: {e}",
            details={"key": key},
        )
    return BackendUnavailableError(
        message=f"Filesystem operation failed: {e}",
        details={"key": key},
    )


class LocalStorageBackend(StorageBackend):
    """Local filesystem storage implementation."""

    def __init__(self, root_dir: str | Path) -> None:
        """
        Initialize local storage backend.

        Args:
            root_dir: Root directory for object storage. It does not need to
                exist until the first write.
        """
        self.root_dir = Path(root_dir).resolve()

    @property
    def backend_name(self) -> str:
        return "local"

    def _get_full_path(self, key: str) -> Path:
        """Get full filesystem path for a key."""
        # Prevent directory traversal attacks
        full_path = (self.root_dir / key.lstrip("/")).resolve()

        if full_path != self.root_dir and self.root_dir not in full_path.parents:
            raise InvalidArgumentError(
                message="Invalid object key",
                details={"key": key, "reason": "Path traversal detected"},
            )

        return full_path

    async def list_objects(self, prefix: str = "") -> list[Object]:
        """List regular files directly inside the prefix directory."""
        directory = self._get_full_path(prefix)

        try:
            names = await aiofiles.os.listdir(directory)
        except FileNotFoundError:
            # OK if the directory doesn't exist yet
            logger.debug("objects_listed", backend="local", prefix=prefix, count=0)
            return []
        except OSError as e:
            raise _translate_os_error(e, prefix) from e

        objects: list[Object] = []
        for name in sorted(names):
            path = directory / name
            try:
                if await aiofiles.os.path.isdir(path):
                    continue
                stat = await aiofiles.os.stat(path)
            except FileNotFoundError:
                # Removed between listdir and stat
                continue
            except OSError as e:
                raise _translate_os_error(e, prefix) from e

            objects.append(
                Object(
                    path=name,
                    data=b"",
                    last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                )
            )

        logger.debug("objects_listed", backend="local", prefix=prefix, count=len(objects))
        return objects

    async def get_object(self, key: str) -> Object:
        """Read an object from local storage."""
        full_path = self._get_full_path(key)

        try:
            async with aiofiles.open(full_path, "rb") as f:
                content = await f.read()
            stat = await aiofiles.os.stat(full_path)
        except IsADirectoryError as e:
            raise ObjectNotFoundError(key, backend="local") from e
        except OSError as e:
            raise _translate_os_error(e, key) from e

        logger.debug("object_fetched", backend="local", key=key, size=len(content))
        return Object(
            path=join_object_path(key.lstrip("/")),
            data=content,
            last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        )

    async def put_object(self, key: str, data: bytes) -> None:
        """Write an object, creating parent directories on demand."""
        full_path = self._get_full_path(key)

        try:
            await aiofiles.os.makedirs(full_path.parent, exist_ok=True)
            async with aiofiles.open(full_path, "wb") as f:
                await f.write(data)
        except OSError as e:
            raise _translate_os_error(e, key) from e

        logger.debug("object_stored", backend="local", key=key, size=len(data))

    async def delete_object(self, key: str) -> None:
        """Delete an object from local storage."""
        full_path = self._get_full_path(key)

        try:
            await aiofiles.os.remove(full_path)
        except OSError as e:
            raise _translate_os_error(e, key) from e

        logger.debug("object_deleted", backend="local", key=key)
