"""Tests for the target-files history store."""

import os
from datetime import datetime
from pathlib import Path
from unittest.mock import patch

import pytest

from otabuild.artifacts.history import (
    HistoryStore,
    clear_directory,
    timestamped_name,
)
from otabuild.exceptions import ArchiveIOError

NOW = datetime(2024, 1, 2, 3, 4)


def _touch(path: Path, mtime: float | None = None, content: bytes = b"zip") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


class TestTimestampedName:
    """Tests for timestamped_name function."""

    def test_appends_timestamp(self) -> None:
        """A plain archive name gets the timestamp before .zip."""
        name = timestamped_name("krypton_device-target_files-eng.zip", NOW)
        assert name == "krypton_device-target_files-eng-20240102-0304.zip"

    def test_replaces_existing_timestamp(self) -> None:
        """A previous rotation's timestamp is replaced, not stacked."""
        name = timestamped_name("device-target_files-20231201-1200.zip", NOW)
        assert name == "device-target_files-20240102-0304.zip"

    def test_defaults_to_current_time(self) -> None:
        """Without a time the name still carries a timestamp."""
        name = timestamped_name("device-target_files.zip")
        assert name.startswith("device-target_files-")
        assert name.endswith(".zip")
        assert len(name) == len("device-target_files-YYYYMMDD-HHMM.zip")


class TestClearDirectory:
    """Tests for clear_directory function."""

    def test_removes_files_and_subdirectories(self, tmp_path: Path) -> None:
        """All entries go, the directory stays."""
        _touch(tmp_path / "a.zip")
        _touch(tmp_path / "sub" / "b.zip")

        removed = clear_directory(tmp_path)

        assert removed == 2
        assert tmp_path.is_dir()
        assert list(tmp_path.iterdir()) == []

    def test_missing_directory(self, tmp_path: Path) -> None:
        """Clearing a missing directory removes nothing."""
        assert clear_directory(tmp_path / "missing") == 0

    def test_unlink_failure_raises(self, tmp_path: Path) -> None:
        """OS errors surface as ArchiveIOError."""
        _touch(tmp_path / "a.zip")

        with patch.object(Path, "unlink", side_effect=PermissionError("denied")):
            with pytest.raises(ArchiveIOError) as exc_info:
                clear_directory(tmp_path)

        assert exc_info.value.operation == "delete"


class TestHistoryStore:
    """Tests for HistoryStore class."""

    def test_latest_none_when_empty(self, tmp_path: Path) -> None:
        """An empty or missing history has no incremental base."""
        assert HistoryStore(tmp_path / "history").latest() is None

    def test_latest_by_mtime(self, tmp_path: Path) -> None:
        """The most recently modified archive is the base."""
        history = tmp_path / "history"
        _touch(history / "z-target_files-20230101-0000.zip", 1_000_000)
        newest = _touch(history / "a-target_files-20230102-0000.zip", 2_000_000)

        latest = HistoryStore(history).latest()

        assert latest is not None
        assert latest.path == newest

    def test_ensure_creates_directory(self, tmp_path: Path) -> None:
        """ensure() creates missing parents."""
        history = tmp_path / "a" / "b"

        assert HistoryStore(history).ensure() == history
        assert history.is_dir()

    def test_wipe(self, tmp_path: Path) -> None:
        """wipe() empties the directory."""
        history = tmp_path / "history"
        _touch(history / "one-target_files.zip")
        _touch(history / "two-target_files.zip")

        assert HistoryStore(history).wipe() == 2
        assert list(history.iterdir()) == []

    def test_rotate_copies_with_timestamp(self, tmp_path: Path) -> None:
        """The built archive is copied under a timestamped name."""
        source_dir = tmp_path / "out"
        source = _touch(source_dir / "obj" / "krypton_device-target_files-eng.zip", content=b"new")
        history = tmp_path / "history"

        result = HistoryStore(history).rotate(source_dir, now=NOW)

        assert result.success is True
        assert result.source == source
        assert result.destination == history / "krypton_device-target_files-eng-20240102-0304.zip"
        assert result.destination.read_bytes() == b"new"
        assert result.wiped is False
        assert source.exists()

    def test_rotate_copy_becomes_latest(self, tmp_path: Path) -> None:
        """Without a wipe, older entries stay and the new copy is the base."""
        source_dir = tmp_path / "out"
        _touch(source_dir / "device-target_files.zip")
        history = tmp_path / "history"
        old = _touch(history / "device-target_files-20230101-0000.zip", 1_000_000)

        store = HistoryStore(history)
        result = store.rotate(source_dir, now=NOW)

        assert old.exists()
        latest = store.latest()
        assert latest is not None
        assert latest.path == result.destination

    def test_rotate_with_wipe(self, tmp_path: Path) -> None:
        """wipe_first removes old entries before copying."""
        source_dir = tmp_path / "out"
        _touch(source_dir / "device-target_files.zip")
        history = tmp_path / "history"
        old = _touch(history / "device-target_files-20230101-0000.zip")

        result = HistoryStore(history).rotate(source_dir, wipe_first=True, now=NOW)

        assert result.wiped is True
        assert not old.exists()
        assert [p.name for p in history.iterdir()] == ["device-target_files-20240102-0304.zip"]

    def test_rotate_without_source_touches_nothing(self, tmp_path: Path) -> None:
        """No built archive: nothing is wiped or created."""
        source_dir = tmp_path / "out"
        source_dir.mkdir()
        history = tmp_path / "history"
        old = _touch(history / "device-target_files-20230101-0000.zip")

        result = HistoryStore(history).rotate(source_dir, wipe_first=True, now=NOW)

        assert result.success is False
        assert result.destination is None
        assert old.exists()

    def test_rotate_without_source_does_not_create_history(self, tmp_path: Path) -> None:
        """A missing history directory stays missing when nothing is copied."""
        history = tmp_path / "history"

        result = HistoryStore(history).rotate(tmp_path / "out")

        assert result.success is False
        assert not history.exists()

    def test_rotate_copy_failure(self, tmp_path: Path) -> None:
        """Copy errors surface as ArchiveIOError."""
        source_dir = tmp_path / "out"
        _touch(source_dir / "device-target_files.zip")

        with patch("otabuild.artifacts.history.shutil.copy", side_effect=OSError("disk full")):
            with pytest.raises(ArchiveIOError) as exc_info:
                HistoryStore(tmp_path / "history").rotate(source_dir, now=NOW)

        assert exc_info.value.operation == "copy"

    def test_rotate_ignores_history_inside_source(self, tmp_path: Path) -> None:
        """A history kept under product out is not rotated back into itself."""
        source_dir = tmp_path / "out"
        history = source_dir / "history"
        old = _touch(history / "device-target_files-20230101-0000.zip", content=b"OLD")
        new = _touch(
            source_dir / "obj" / "PACKAGING" / "target_files_intermediates"
            / "krypton_device-target_files-eng.zip",
            content=b"NEW",
        )

        result = HistoryStore(history).rotate(source_dir, wipe_first=True, now=NOW)

        assert result.success is True
        assert result.source == new
        assert not old.exists()
        assert result.destination == history / "krypton_device-target_files-eng-20240102-0304.zip"
        assert result.destination.read_bytes() == b"NEW"

    def test_rotate_history_only_inside_source(self, tmp_path: Path) -> None:
        """Only history copies under product out means nothing new to rotate."""
        source_dir = tmp_path / "out"
        history = source_dir / "history"
        old = _touch(history / "device-target_files-20230101-0000.zip")

        result = HistoryStore(history).rotate(source_dir, wipe_first=True, now=NOW)

        assert result.success is False
        assert old.exists()
