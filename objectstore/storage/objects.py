"""
Common object model shared by every storage backend.

Also holds the path helpers that make prefix-keyed stores list a prefix the
same way a filesystem lists one directory level.
"""

import posixpath
from dataclasses import dataclass, field
from datetime import datetime, timezone

EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


@dataclass
class Metadata:
    """Name/version placeholder attached to an object."""

    name: str = ""
    version: str = ""


@dataclass
class Object:
    """A stored item as seen by a caller."""

    path: str  # Backend-relative key, prefix already removed
    data: bytes = b""  # Only populated by get_object
    last_modified: datetime = field(default=EPOCH)
    metadata: Metadata | None = None

    def has_extension(self, extension: str) -> bool:
        """Check whether the last path segment ends in ``.<extension>``."""
        name = self.path.rsplit("/", 1)[-1]
        dot = name.rfind(".")
        return dot >= 0 and name[dot:] == f".{extension}"


def clean_prefix(prefix: str) -> str:
    """Strip leading and trailing separators from a backend prefix."""
    return prefix.strip("/")


def remove_prefix_from_object_path(prefix: str, path: str) -> str:
    """Remove one leading ``prefix/`` from a raw backend key."""
    if not prefix:
        return path
    return path.removeprefix(f"{prefix}/")


def object_path_is_invalid(path: str) -> bool:
    """
    Check whether a prefix-stripped key must be skipped when listing.

    Keys that still contain a separator live in a "subdirectory" of the
    listed prefix; skipping them keeps listings one level deep.
    """
    return "/" in path or path == ""


def join_object_path(*elements: str) -> str:
    """
    Join key elements with ``/``, ignoring empty ones.

    The result is normalized (no duplicate or trailing separators), and is
    empty when every element is empty.
    """
    joined = "/".join(element for element in elements if element)
    if not joined:
        return ""
    return posixpath.normpath(joined)
