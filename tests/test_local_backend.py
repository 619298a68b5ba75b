"""
Local filesystem backend tests.
"""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from objectstore.core.exceptions import InvalidArgumentError, ObjectNotFoundError
from objectstore.storage.local import LocalStorageBackend


@pytest.mark.asyncio
async def test_put_creates_parent_directories(local_backend: LocalStorageBackend, local_root: Path):
    await local_backend.put_object("a/b/c/file.txt", b"nested")

    assert (local_root / "a" / "b" / "c" / "file.txt").read_bytes() == b"nested"


@pytest.mark.asyncio
async def test_list_skips_directories(local_backend: LocalStorageBackend, local_root: Path):
    """Empty and non-empty subdirectories never show up in a listing."""
    await local_backend.put_object("test1.txt", b"one")
    await local_backend.put_object("sub/nested.txt", b"two")
    (local_root / "ignoreme").mkdir()

    objects = await local_backend.list_objects("")

    assert [o.path for o in objects] == ["test1.txt"]


@pytest.mark.asyncio
async def test_list_is_sorted_by_name(local_backend: LocalStorageBackend):
    for name in ("c.txt", "a.txt", "b.txt"):
        await local_backend.put_object(name, b"x")

    objects = await local_backend.list_objects()

    assert [o.path for o in objects] == ["a.txt", "b.txt", "c.txt"]


@pytest.mark.asyncio
async def test_list_before_root_exists(tmp_path: Path):
    backend = LocalStorageBackend(tmp_path / "never-created")

    assert await backend.list_objects("") == []
    assert not (tmp_path / "never-created").exists()


@pytest.mark.asyncio
async def test_get_sets_last_modified_from_mtime(local_backend: LocalStorageBackend, local_root: Path):
    await local_backend.put_object("stamp.txt", b"x")

    obj = await local_backend.get_object("stamp.txt")

    expected = datetime.fromtimestamp((local_root / "stamp.txt").stat().st_mtime, tz=timezone.utc)
    assert obj.last_modified == expected
    assert obj.last_modified.tzinfo is not None


@pytest.mark.asyncio
async def test_listed_timestamp_matches_get(local_backend: LocalStorageBackend):
    await local_backend.put_object("same.txt", b"x")

    [listed] = await local_backend.list_objects()
    fetched = await local_backend.get_object("same.txt")

    assert listed.last_modified == fetched.last_modified


@pytest.mark.asyncio
async def test_get_directory_is_not_found(local_backend: LocalStorageBackend):
    await local_backend.put_object("dir/file.txt", b"x")

    with pytest.raises(ObjectNotFoundError):
        await local_backend.get_object("dir")


@pytest.mark.asyncio
@pytest.mark.parametrize("key", ["../escape.txt", "a/../../escape.txt"])
async def test_path_traversal_is_rejected(local_backend: LocalStorageBackend, key: str):
    with pytest.raises(InvalidArgumentError):
        await local_backend.put_object(key, b"x")


@pytest.mark.asyncio
async def test_leading_slash_stays_inside_root(local_backend: LocalStorageBackend, local_root: Path):
    await local_backend.put_object("/rooted.txt", b"x")

    assert (local_root / "rooted.txt").exists()


def test_backend_name(local_backend: LocalStorageBackend):
    assert local_backend.backend_name == "local"


@pytest.mark.asyncio
async def test_get_reports_same_path_as_list(local_backend: LocalStorageBackend):
    await local_backend.put_object("a.txt", b"a")

    obj = await local_backend.get_object("/a.txt")
    listed = await local_backend.list_objects()

    assert obj.path == "a.txt"
    assert [o.path for o in listed] == [obj.path]
