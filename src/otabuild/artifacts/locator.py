"""Target-files and OTA archive lookup by name pattern and modification time."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

# Archives the build system leaves behind for downstream packaging
TARGET_FILES_PATTERN = "*target_files*.zip"

# Substring that marks an incremental package
INCREMENTAL_MARKER = "incremental"

# Substrings that never belong to a full OTA package (fastboot image zips)
FULL_EXCLUDE_MARKERS = (INCREMENTAL_MARKER, "img")


class ArchiveKind(Enum):
    """Logical kind of an archive."""

    FULL = "full"
    INCREMENTAL = "incremental"


@dataclass(frozen=True)
class TargetFilesArchive:
    """An archive found on disk.

    Attributes:
        path: Location of the archive.
        mtime: Modification time in seconds since the epoch.
        kind: Full or incremental, derived from the file name.
    """

    path: Path
    mtime: float
    kind: ArchiveKind

    @property
    def name(self) -> str:
        """Base file name of the archive."""
        return self.path.name

    @property
    def size(self) -> int:
        """Current size of the archive in bytes."""
        return self.path.stat().st_size


def classify(name: str) -> ArchiveKind:
    """Classify an archive by its file name.

    Args:
        name: Base file name.

    Returns:
        INCREMENTAL if the name carries the incremental marker, FULL otherwise.
    """
    if INCREMENTAL_MARKER in name:
        return ArchiveKind.INCREMENTAL
    return ArchiveKind.FULL


def _matches_kind(name: str, kind: ArchiveKind | None) -> bool:
    if kind is None:
        return True
    if kind == ArchiveKind.INCREMENTAL:
        return INCREMENTAL_MARKER in name
    return not any(marker in name for marker in FULL_EXCLUDE_MARKERS)


def _sort_key(archive: TargetFilesArchive) -> tuple[float, str]:
    # Total order: mtime first, path string breaks ties
    return archive.mtime, str(archive.path)


def list_archives(
    directory: Path,
    kind: ArchiveKind | None = None,
    pattern: str = TARGET_FILES_PATTERN,
    recursive: bool = False,
) -> list[TargetFilesArchive]:
    """List matching archives in a directory.

    Args:
        directory: Directory to scan.
        kind: Restrict to one kind; None accepts every match.
        pattern: Glob pattern the file name must match.
        recursive: Whether to descend into subdirectories.

    Returns:
        Matching archives sorted oldest first, ties ordered by path.
        Empty if the directory does not exist.
    """
    if not directory.is_dir():
        return []

    candidates = directory.rglob(pattern) if recursive else directory.glob(pattern)

    archives = []
    for path in candidates:
        if not path.is_file() or not _matches_kind(path.name, kind):
            continue
        try:
            mtime = path.stat().st_mtime
        except OSError:
            # Vanished between the scan and the stat
            continue
        archives.append(TargetFilesArchive(path=path, mtime=mtime, kind=classify(path.name)))

    archives.sort(key=_sort_key)
    return archives


def find_latest(
    directory: Path,
    kind: ArchiveKind | None = None,
    pattern: str = TARGET_FILES_PATTERN,
    recursive: bool = False,
) -> TargetFilesArchive | None:
    """Find the most recently modified matching archive.

    Not finding anything is an expected outcome, so this never raises
    for missing or empty directories.

    Args:
        directory: Directory to scan.
        kind: Restrict to one kind; None accepts every match.
        pattern: Glob pattern the file name must match.
        recursive: Whether to descend into subdirectories.

    Returns:
        The archive with the greatest mtime (lexically last path on ties),
        or None if nothing matches.
    """
    archives = list_archives(directory, kind=kind, pattern=pattern, recursive=recursive)
    if not archives:
        return None
    return archives[-1]


def find_first(
    directory: Path,
    pattern: str = TARGET_FILES_PATTERN,
    exclude: Path | None = None,
) -> Path | None:
    """Find the first matching file below a directory.

    Used to pick up the archive a build just produced; the product out
    tree holds a single target-files package per build.

    Args:
        directory: Directory to search recursively.
        pattern: Glob pattern the file name must match.
        exclude: Subtree to skip, such as a history directory kept
            inside the product out tree.

    Returns:
        First match in sorted path order, or None.
    """
    if not directory.is_dir():
        return None
    skipped = exclude.resolve() if exclude is not None else None
    matches = sorted(
        p
        for p in directory.rglob(pattern)
        if p.is_file() and (skipped is None or skipped not in p.resolve().parents)
    )
    return matches[0] if matches else None
