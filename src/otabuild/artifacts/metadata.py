"""OTA package metadata extraction."""

import zipfile
from pathlib import Path

from otabuild.exceptions import ManifestError

# Key/value record written by ota_from_target_files into every package
METADATA_ENTRY = "META-INF/com/android/metadata"

PRE_BUILD_INCREMENTAL_KEY = "pre-build-incremental"


def parse_metadata(content: str) -> dict[str, str]:
    """Parse a metadata record of "key=value" lines.

    Args:
        content: Text of the metadata entry.

    Returns:
        Mapping of keys to values; lines without "=" are ignored.
    """
    metadata: dict[str, str] = {}
    for line in content.splitlines():
        key, sep, value = line.partition("=")
        if sep:
            metadata[key.strip()] = value.strip()
    return metadata


def read_package_metadata(package: Path) -> dict[str, str]:
    """Read the metadata record embedded in an OTA package.

    Args:
        package: Path to the OTA zip.

    Returns:
        Parsed metadata, empty if the package has no metadata entry.

    Raises:
        ManifestError: If the package cannot be opened as a zip.
    """
    try:
        with zipfile.ZipFile(package) as zf:
            try:
                raw = zf.read(METADATA_ENTRY)
            except KeyError:
                return {}
    except (OSError, zipfile.BadZipFile) as e:
        raise ManifestError(f"Failed to read metadata from {package}: {e}") from e

    return parse_metadata(raw.decode("utf-8", errors="replace"))


def get_pre_build_incremental(package: Path) -> str:
    """Get the incremental version of the build an OTA package applies on top of.

    Args:
        package: Path to an incremental OTA zip.

    Returns:
        The pre-build incremental identifier, or "" when not recorded.
    """
    return read_package_metadata(package).get(PRE_BUILD_INCREMENTAL_KEY, "")
