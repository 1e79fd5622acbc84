"""YAML schema validation for otabuild.yaml configuration files."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

CONFIG_FILENAME = "otabuild.yaml"


class ConfigError(Exception):
    """Base exception for configuration errors."""

    pass


class ConfigParseError(ConfigError):
    """Error parsing YAML configuration."""

    pass


class ConfigValidationError(ConfigError):
    """Error validating configuration schema."""

    pass


@dataclass
class ReleaseConfig:
    """Where released packages are published and where manifests go."""

    branch: str = "A12"
    primary_url: str = "https://kosp.e11z.net/d"
    secondary_url: str = "https://sourceforge.net/projects/kosp/files"
    json_dir: str = "ota"


@dataclass
class TargetsConfig:
    """Build target names."""

    base: str = "kosp"
    incremental: str = "kosp-incremental"
    fastboot: str = "kosp-fastboot"
    boot: str = "kosp-boot"


@dataclass
class ProductConfig:
    """Product naming."""

    prefix: str = "KOSP"
    lunch_prefix: str = "krypton"


@dataclass
class SigningConfig:
    """Signing configuration."""

    key_dir: str | None = None


@dataclass
class OtaBuildConfig:
    """Complete otabuild.yaml configuration."""

    release: ReleaseConfig = field(default_factory=ReleaseConfig)
    targets: TargetsConfig = field(default_factory=TargetsConfig)
    product: ProductConfig = field(default_factory=ProductConfig)
    signing: SigningConfig = field(default_factory=SigningConfig)


def _parse_yaml(content: str) -> dict[str, Any]:
    """Parse YAML content into a dictionary.

    Args:
        content: Raw YAML string.

    Returns:
        Parsed dictionary.

    Raises:
        ConfigParseError: If YAML parsing fails.
    """
    try:
        result = yaml.safe_load(content)
        if result is None:
            return {}
        if not isinstance(result, dict):
            raise ConfigParseError("Configuration must be a YAML mapping")
        return result
    except yaml.YAMLError as e:
        raise ConfigParseError(f"Failed to parse YAML: {e}") from e


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigValidationError(f"{name} must be a mapping")
    return section


def _string_field(section: dict[str, Any], section_name: str, key: str, default: str) -> str:
    """Read a non-empty string field, falling back to the default when absent."""
    if key not in section:
        return default
    value = section[key]
    if not isinstance(value, str) or not value.strip():
        raise ConfigValidationError(f"{section_name}.{key} must be a non-empty string")
    return value.strip()


def _validate_release(data: dict[str, Any]) -> ReleaseConfig:
    section = _section(data, "release")
    defaults = ReleaseConfig()
    return ReleaseConfig(
        branch=_string_field(section, "release", "branch", defaults.branch),
        primary_url=_string_field(
            section, "release", "primary_url", defaults.primary_url
        ).rstrip("/"),
        secondary_url=_string_field(
            section, "release", "secondary_url", defaults.secondary_url
        ).rstrip("/"),
        json_dir=_string_field(section, "release", "json_dir", defaults.json_dir),
    )


def _validate_targets(data: dict[str, Any]) -> TargetsConfig:
    """Validate the targets section.

    Target names must be distinct, since the plan is de-duplicated by name.
    """
    section = _section(data, "targets")
    defaults = TargetsConfig()
    targets = TargetsConfig(
        base=_string_field(section, "targets", "base", defaults.base),
        incremental=_string_field(section, "targets", "incremental", defaults.incremental),
        fastboot=_string_field(section, "targets", "fastboot", defaults.fastboot),
        boot=_string_field(section, "targets", "boot", defaults.boot),
    )
    names = [targets.base, targets.incremental, targets.fastboot, targets.boot]
    if len(set(names)) != len(names):
        raise ConfigValidationError("targets must all have distinct names")
    return targets


def _validate_product(data: dict[str, Any]) -> ProductConfig:
    section = _section(data, "product")
    defaults = ProductConfig()
    return ProductConfig(
        prefix=_string_field(section, "product", "prefix", defaults.prefix),
        lunch_prefix=_string_field(
            section, "product", "lunch_prefix", defaults.lunch_prefix
        ),
    )


def _validate_signing(data: dict[str, Any]) -> SigningConfig:
    section = _section(data, "signing")
    if "key_dir" not in section:
        return SigningConfig()
    return SigningConfig(key_dir=_string_field(section, "signing", "key_dir", ""))


def parse_config(content: str) -> OtaBuildConfig:
    """Parse and validate otabuild.yaml configuration content.

    Every section is optional; missing fields take their defaults.

    Args:
        content: Raw YAML string.

    Returns:
        Validated OtaBuildConfig object.

    Raises:
        ConfigParseError: If YAML parsing fails.
        ConfigValidationError: If schema validation fails.
    """
    data = _parse_yaml(content)
    return OtaBuildConfig(
        release=_validate_release(data),
        targets=_validate_targets(data),
        product=_validate_product(data),
        signing=_validate_signing(data),
    )


def load_config(path: Path) -> OtaBuildConfig:
    """Load and validate configuration from a file.

    Args:
        path: Path to otabuild.yaml.

    Returns:
        Validated OtaBuildConfig object.

    Raises:
        ConfigParseError: If file reading or YAML parsing fails.
        ConfigValidationError: If schema validation fails.
    """
    try:
        content = path.read_text()
    except OSError as e:
        raise ConfigParseError(f"Failed to read configuration file: {e}") from e

    return parse_config(content)


def load_config_or_default(build_top: Path) -> OtaBuildConfig:
    """Load otabuild.yaml from the source root, or defaults when absent."""
    path = build_top / CONFIG_FILENAME
    if not path.exists():
        return OtaBuildConfig()
    return load_config(path)
