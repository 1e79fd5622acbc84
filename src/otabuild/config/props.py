"""build.prop lookup."""

from pathlib import Path

from otabuild.exceptions import ArchiveIOError, MissingPropertyError

BUILD_PROP_RELPATH = Path("system") / "build.prop"

PROP_VERSION = "ro.krypton.build.version"
PROP_BUILD_DATE_UTC = "ro.build.date.utc"


def build_prop_path(product_out: Path) -> Path:
    """Get the path of the system build.prop under a product out directory."""
    return product_out / BUILD_PROP_RELPATH


def read_props(prop_file: Path) -> dict[str, str]:
    """Parse a build.prop file into a dictionary.

    Blank lines and comments are skipped. Later definitions win.

    Args:
        prop_file: Path to the build.prop file.

    Returns:
        Mapping of property name to value, empty if the file is missing.

    Raises:
        ArchiveIOError: If the file exists but cannot be read.
    """
    if not prop_file.exists():
        return {}

    try:
        text = prop_file.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise ArchiveIOError(prop_file, "read", e) from e

    props: dict[str, str] = {}
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, _, value = stripped.partition("=")
        props[key.strip()] = value.strip()
    return props


def get_prop_value(props: dict[str, str], name: str) -> str:
    """Get a required property value.

    Args:
        props: Parsed properties.
        name: Property name.

    Returns:
        The property value.

    Raises:
        MissingPropertyError: If the property is absent or empty.
    """
    value = props.get(name, "")
    if not value:
        raise MissingPropertyError(f"Required build property {name} is not set", name)
    return value
