"""Streaming file digests."""

import hashlib
from pathlib import Path

from otabuild.exceptions import ArchiveIOError

CHUNK_SIZE = 1024 * 1024


def file_digests(path: Path, algorithms: tuple[str, ...] = ("md5", "sha512")) -> dict[str, str]:
    """Compute several digests of a file in a single pass.

    Args:
        path: File to hash.
        algorithms: hashlib algorithm names.

    Returns:
        Mapping of algorithm name to hex digest.

    Raises:
        ArchiveIOError: If the file cannot be read.
    """
    hashers = {name: hashlib.new(name) for name in algorithms}
    try:
        with path.open("rb") as fh:
            for chunk in iter(lambda: fh.read(CHUNK_SIZE), b""):
                for hasher in hashers.values():
                    hasher.update(chunk)
    except OSError as e:
        raise ArchiveIOError(path, "checksum", e) from e
    return {name: hasher.hexdigest() for name, hasher in hashers.items()}


def file_size(path: Path) -> int:
    """Get the size of a file in bytes.

    Raises:
        ArchiveIOError: If the file cannot be stat'ed.
    """
    try:
        return path.stat().st_size
    except OSError as e:
        raise ArchiveIOError(path, "stat", e) from e
