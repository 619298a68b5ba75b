"""Snapshot diffing between two object listings."""

from dataclasses import dataclass, field
from datetime import timedelta

from objectstore.storage.objects import Object


@dataclass
class ObjectSliceDiff:
    """What changed between two calls to list_objects."""

    change: bool = False
    removed: list[Object] = field(default_factory=list)
    added: list[Object] = field(default_factory=list)
    updated: list[Object] = field(default_factory=list)


def get_object_slice_diff(
    prev: list[Object],
    curr: list[Object],
    timestamp_tolerance: timedelta = timedelta(0),
) -> ObjectSliceDiff:
    """
    Compare two listings of the same backend keyed by object path.

    An object present in both listings counts as updated only when its
    current timestamp is newer than the previous one by strictly more than
    ``timestamp_tolerance``. Each output list keeps input order.

    Args:
        prev: Earlier listing.
        curr: Later listing.
        timestamp_tolerance: Timestamp delta treated as noise.

    Returns:
        ObjectSliceDiff describing removed, added and updated objects.
    """
    diff = ObjectSliceDiff()
    previous = {o.path: o for o in prev}
    current = {o.path: o for o in curr}

    for p in prev:
        c = current.get(p.path)
        if c is None:
            diff.removed.append(p)
        elif c.last_modified - p.last_modified > timestamp_tolerance:
            diff.updated.append(c)

    for c in curr:
        if c.path not in previous:
            diff.added.append(c)

    diff.change = bool(diff.removed or diff.added or diff.updated)
    return diff
