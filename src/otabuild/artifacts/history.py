"""Rotating history of target-files archives used as incremental bases."""

import re
import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from otabuild.artifacts.locator import (
    TARGET_FILES_PATTERN,
    TargetFilesArchive,
    find_first,
    find_latest,
)
from otabuild.core.logging import get_logger
from otabuild.exceptions import ArchiveIOError

# Minute resolution: two copies within the same minute share a name
TIMESTAMP_FORMAT = "%Y%m%d-%H%M"

# Trailing "-NNNN-NNNN.zip" left by a previous rotation, or a bare ".zip"
_SUFFIX_PATTERN = re.compile(r"-*[0-9]*-*[0-9]*\.zip$")


@dataclass
class RotationResult:
    """Outcome of a history rotation.

    Attributes:
        success: Whether an archive was copied.
        source: The archive picked up from the build output, if any.
        destination: Where it was copied to, if anywhere.
        wiped: Whether the history directory was emptied first.
    """

    success: bool
    source: Path | None = None
    destination: Path | None = None
    wiped: bool = False


def timestamped_name(name: str, now: datetime | None = None) -> str:
    """Replace any trailing timestamp of an archive name with a fresh one.

    Args:
        name: Base file name, ending in .zip.
        now: Time to stamp with (local time now if not provided).

    Returns:
        Name of the form "<stem>-YYYYMMDD-HHMM.zip".
    """
    if now is None:
        now = datetime.now()
    stem = _SUFFIX_PATTERN.sub("", name, count=1)
    return f"{stem}-{now.strftime(TIMESTAMP_FORMAT)}.zip"


def clear_directory(directory: Path) -> int:
    """Delete the contents of a directory, keeping the directory itself.

    Args:
        directory: Directory to empty.

    Returns:
        Number of entries removed; 0 if the directory does not exist.

    Raises:
        ArchiveIOError: If an entry cannot be removed.
    """
    if not directory.is_dir():
        return 0

    removed = 0
    for entry in sorted(directory.iterdir()):
        try:
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
        except OSError as e:
            raise ArchiveIOError(entry, "delete", e) from e
        removed += 1
    return removed


class HistoryStore:
    """A flat directory of previously built target-files archives.

    The most recently modified archive is the base for the next
    incremental build. Only one writer may use a directory at a time.
    """

    def __init__(self, history_dir: Path) -> None:
        """Initialize the store.

        Args:
            history_dir: Directory holding archived target-files packages.
        """
        self.history_dir = history_dir
        self._logger = get_logger("history")

    def ensure(self) -> Path:
        """Create the history directory if it does not exist.

        Returns:
            Path to the history directory.

        Raises:
            ArchiveIOError: If the directory cannot be created.
        """
        try:
            self.history_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ArchiveIOError(self.history_dir, "create", e) from e
        return self.history_dir

    def latest(self) -> TargetFilesArchive | None:
        """Get the current incremental base, or None if the history is empty."""
        return find_latest(self.history_dir, pattern=TARGET_FILES_PATTERN)

    def wipe(self) -> int:
        """Delete every entry in the history directory.

        Returns:
            Number of entries removed.

        Raises:
            ArchiveIOError: If an entry cannot be removed.
        """
        return clear_directory(self.history_dir)

    def rotate(
        self,
        source_dir: Path,
        wipe_first: bool = False,
        now: datetime | None = None,
    ) -> RotationResult:
        """Copy the newly built target-files archive into the history.

        Nothing is touched when the build output holds no archive; the
        failure is reported through the result, not raised. Archives
        already in the history are never picked up, even when the
        history lives under the build output.

        Args:
            source_dir: Build output directory searched for the new archive.
            wipe_first: Empty the history directory before copying.
            now: Time used for the destination name.

        Returns:
            RotationResult describing what was done.

        Raises:
            ArchiveIOError: If wiping or copying fails.
        """
        source = find_first(source_dir, TARGET_FILES_PATTERN, exclude=self.history_dir)
        if source is None:
            self._logger.log_rotation(str(self.history_dir), copied_to=None, wiped=False)
            return RotationResult(success=False)

        self.ensure()

        wiped = False
        if wipe_first:
            removed = self.wipe()
            wiped = True
            self._logger.info(
                "Deleted old target files",
                history_dir=str(self.history_dir),
                removed=removed,
            )

        destination = self.history_dir / timestamped_name(source.name, now)
        try:
            shutil.copy(source, destination)
        except OSError as e:
            raise ArchiveIOError(source, "copy", e) from e

        self._logger.log_rotation(
            str(self.history_dir), copied_to=str(destination), wiped=wiped
        )
        return RotationResult(
            success=True,
            source=source,
            destination=destination,
            wiped=wiped,
        )
