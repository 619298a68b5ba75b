"""Polling change detection on top of list_objects."""

import asyncio
from collections.abc import AsyncIterator
from datetime import timedelta

from objectstore.core.logging import get_logger
from objectstore.storage.base import StorageBackend
from objectstore.storage.diff import ObjectSliceDiff, get_object_slice_diff
from objectstore.storage.objects import Object

logger = get_logger(__name__)


async def watch_objects(
    backend: StorageBackend,
    prefix: str = "",
    timestamp_tolerance: timedelta = timedelta(0),
    interval: float = 5.0,
    previous: list[Object] | None = None,
) -> AsyncIterator[ObjectSliceDiff]:
    """
    Yield the diff between consecutive listings of a prefix.

    Args:
        backend: Backend to poll.
        prefix: Prefix to list on every poll.
        timestamp_tolerance: Passed to get_object_slice_diff.
        interval: Seconds to wait between listings.
        previous: Initial snapshot. Taken from the backend if None.

    Yields:
        One ObjectSliceDiff per poll, including polls without changes.
    """
    if previous is None:
        previous = await backend.list_objects(prefix)

    while True:
        await asyncio.sleep(interval)
        current = await backend.list_objects(prefix)
        diff = get_object_slice_diff(previous, current, timestamp_tolerance)
        if diff.change:
            logger.info(
                "objects_changed",
                backend=backend.backend_name,
                prefix=prefix,
                added=len(diff.added),
                removed=len(diff.removed),
                updated=len(diff.updated),
            )
        previous = current
        yield diff
