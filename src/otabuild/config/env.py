"""Environment variable loading for the build environment."""

import os
from dataclasses import dataclass
from pathlib import Path

# Environment variable names
ENV_BUILD_TOP = "ANDROID_BUILD_TOP"
ENV_PRODUCT_OUT = "OUT"
ENV_BUILD_ID = "KRYPTON_BUILD"
ENV_KEY_DIR = "OTABUILD_KEY_DIR"

# Variables exported to the builder for each invocation
ENV_KOSP_OUT = "KOSP_OUT"
ENV_GAPPS_BUILD = "GAPPS_BUILD"
ENV_PREVIOUS_TARGET_FILES = "PREVIOUS_TARGET_FILES_PACKAGE"

DEFAULT_KEY_DIR_NAME = "certs"


@dataclass
class EnvConfig:
    """Environment-based configuration.

    Attributes:
        build_top: Root of the Android source tree.
        product_out: Product output directory set by lunch, if any.
        build_id: Device build identifier set by lunch, if any.
        key_dir: Directory holding release keys.
    """

    build_top: Path
    product_out: Path | None
    build_id: str | None
    key_dir: Path


def _load_build_top() -> Path:
    """Load the source tree root, falling back to the working directory."""
    build_top = os.environ.get(ENV_BUILD_TOP)
    if build_top:
        return Path(build_top).expanduser()
    return Path.cwd()


def _load_optional_path(name: str) -> Path | None:
    value = os.environ.get(name)
    if value:
        return Path(value).expanduser()
    return None


def load_env_config() -> EnvConfig:
    """Load all environment-based configuration.

    Returns:
        EnvConfig with source root, product out, build id and key directory.
    """
    build_top = _load_build_top()
    key_dir = _load_optional_path(ENV_KEY_DIR) or build_top / DEFAULT_KEY_DIR_NAME
    return EnvConfig(
        build_top=build_top,
        product_out=_load_optional_path(ENV_PRODUCT_OUT),
        build_id=os.environ.get(ENV_BUILD_ID) or None,
        key_dir=key_dir,
    )