"""Tests for environment variable loading."""

import os
from pathlib import Path
from unittest.mock import patch

from otabuild.config.env import (
    DEFAULT_KEY_DIR_NAME,
    ENV_BUILD_ID,
    ENV_BUILD_TOP,
    ENV_KEY_DIR,
    ENV_PRODUCT_OUT,
    load_env_config,
)


class TestLoadEnvConfig:
    """Tests for load_env_config function."""

    def test_full_environment(self, tmp_path: Path) -> None:
        """All variables set by lunch are picked up."""
        with patch.dict(
            os.environ,
            {
                ENV_BUILD_TOP: str(tmp_path),
                ENV_PRODUCT_OUT: str(tmp_path / "out" / "target" / "product" / "device"),
                ENV_BUILD_ID: "device",
                ENV_KEY_DIR: str(tmp_path / "keys"),
            },
            clear=True,
        ):
            config = load_env_config()

        assert config.build_top == tmp_path
        assert config.product_out == tmp_path / "out" / "target" / "product" / "device"
        assert config.build_id == "device"
        assert config.key_dir == tmp_path / "keys"

    def test_defaults_without_lunch(self, tmp_path: Path) -> None:
        """Without lunch the working directory is the source root."""
        with patch.dict(os.environ, {}, clear=True):
            with patch("otabuild.config.env.Path.cwd", return_value=tmp_path):
                config = load_env_config()

        assert config.build_top == tmp_path
        assert config.product_out is None
        assert config.build_id is None
        assert config.key_dir == tmp_path / DEFAULT_KEY_DIR_NAME

    def test_empty_values_are_unset(self, tmp_path: Path) -> None:
        """Empty variables count as unset."""
        with patch.dict(
            os.environ,
            {ENV_BUILD_TOP: str(tmp_path), ENV_PRODUCT_OUT: "", ENV_BUILD_ID: ""},
            clear=True,
        ):
            config = load_env_config()

        assert config.product_out is None
        assert config.build_id is None
