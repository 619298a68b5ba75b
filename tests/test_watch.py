"""
Polling change detection tests.
"""

from pathlib import Path

import pytest

from objectstore.cli import main
from objectstore.storage.local import LocalStorageBackend
from objectstore.storage.watch import watch_objects


@pytest.mark.asyncio
async def test_reports_added_then_removed(local_backend: LocalStorageBackend):
    changes = watch_objects(local_backend, interval=0, previous=[])

    await local_backend.put_object("a.txt", b"a")
    first = await anext(changes)
    assert first.change
    assert [o.path for o in first.added] == ["a.txt"]

    await local_backend.delete_object("a.txt")
    second = await anext(changes)
    assert [o.path for o in second.removed] == ["a.txt"]
    assert second.added == []

    await changes.aclose()


@pytest.mark.asyncio
async def test_quiet_poll_has_no_change(local_backend: LocalStorageBackend):
    await local_backend.put_object("a.txt", b"a")
    changes = watch_objects(local_backend, interval=0)

    diff = await anext(changes)

    assert not diff.change
    await changes.aclose()


def test_watch_command_prints_nothing_without_changes(tmp_path: Path, monkeypatch, capsys):
    root = tmp_path / "storage"
    root.mkdir()
    (root / "a.txt").write_text("a")
    monkeypatch.setenv("STORAGE_BACKEND", "local")
    monkeypatch.setenv("LOCAL_STORAGE_PATH", str(root))
    monkeypatch.chdir(tmp_path)

    assert main(["objects", "watch", "--interval", "0", "--count", "2", "-o", "json"]) == 0
    assert capsys.readouterr().out == ""


def test_watch_command_rejects_negative_interval(tmp_path: Path, monkeypatch, capsys):
    monkeypatch.setenv("STORAGE_BACKEND", "local")
    monkeypatch.setenv("LOCAL_STORAGE_PATH", str(tmp_path / "storage"))
    monkeypatch.chdir(tmp_path)

    assert main(["objects", "watch", "--interval", "-1"]) == 5
    assert '"INVALID_ARGUMENT"' in capsys.readouterr().err
