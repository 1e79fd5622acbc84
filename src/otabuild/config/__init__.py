"""Configuration parsing and validation."""

from otabuild.config.env import (
    ENV_BUILD_ID,
    ENV_BUILD_TOP,
    ENV_GAPPS_BUILD,
    ENV_KEY_DIR,
    ENV_KOSP_OUT,
    ENV_PREVIOUS_TARGET_FILES,
    ENV_PRODUCT_OUT,
    EnvConfig,
    load_env_config,
)
from otabuild.config.props import (
    PROP_BUILD_DATE_UTC,
    PROP_VERSION,
    build_prop_path,
    get_prop_value,
    read_props,
)
from otabuild.config.schema import (
    CONFIG_FILENAME,
    ConfigError,
    ConfigParseError,
    ConfigValidationError,
    OtaBuildConfig,
    ProductConfig,
    ReleaseConfig,
    SigningConfig,
    TargetsConfig,
    load_config,
    load_config_or_default,
    parse_config,
)

__all__ = [
    # Schema types
    "OtaBuildConfig",
    "ReleaseConfig",
    "TargetsConfig",
    "ProductConfig",
    "SigningConfig",
    "CONFIG_FILENAME",
    # Schema functions
    "parse_config",
    "load_config",
    "load_config_or_default",
    # Schema errors
    "ConfigError",
    "ConfigParseError",
    "ConfigValidationError",
    # Environment
    "EnvConfig",
    "load_env_config",
    "ENV_BUILD_TOP",
    "ENV_PRODUCT_OUT",
    "ENV_BUILD_ID",
    "ENV_KEY_DIR",
    "ENV_KOSP_OUT",
    "ENV_GAPPS_BUILD",
    "ENV_PREVIOUS_TARGET_FILES",
    # Build properties
    "PROP_VERSION",
    "PROP_BUILD_DATE_UTC",
    "build_prop_path",
    "read_props",
    "get_prop_value",
]
