"""Shared fixtures for integration tests."""

from __future__ import annotations

import zipfile
from io import StringIO
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from rich.console import Console

from otabuild.artifacts.metadata import METADATA_ENTRY
from otabuild.config.env import EnvConfig
from otabuild.display import StatusDisplay

DEVICE = "device"
BUILD_PROPS = "ro.krypton.build.version=2.1\nro.build.date.utc=1704110400\n"
SIGNING_TOOLS = {"sign_target_files_apks", "ota_from_target_files"}


# =============================================================================
# Source Tree Fixtures
# =============================================================================


@pytest.fixture
def source_tree(tmp_path: Path) -> Path:
    """Create a source root with a lunched product out directory."""
    build_top = tmp_path / "src"
    product_out = build_top / "out" / "target" / "product" / DEVICE
    (product_out / "system").mkdir(parents=True)
    (product_out / "system" / "build.prop").write_text(BUILD_PROPS, encoding="utf-8")
    (build_top / "build" / "soong").mkdir(parents=True)
    (build_top / "build" / "soong" / "soong_ui.bash").write_text("#!/bin/bash\n")
    return build_top


@pytest.fixture
def product_out(source_tree: Path) -> Path:
    return source_tree / "out" / "target" / "product" / DEVICE


@pytest.fixture
def history_dir(tmp_path: Path) -> Path:
    return tmp_path / "target-files"


@pytest.fixture
def env(source_tree: Path, product_out: Path) -> EnvConfig:
    return EnvConfig(
        build_top=source_tree,
        product_out=product_out,
        build_id=DEVICE,
        key_dir=source_tree / "certs",
    )


@pytest.fixture
def lunch_env(source_tree: Path, product_out: Path) -> dict[str, str | None]:
    return {
        "ANDROID_BUILD_TOP": str(source_tree),
        "OUT": str(product_out),
        "KRYPTON_BUILD": DEVICE,
        "OTABUILD_KEY_DIR": None,
    }


@pytest.fixture
def display() -> StatusDisplay:
    return StatusDisplay(console=Console(file=StringIO(), width=200))


# =============================================================================
# Simulated Build System
# =============================================================================


class SimulatedBuild:
    """Stands in for soong_ui.bash and the releasetools host binaries.

    Build targets drop the packages they would produce. Signing tools
    write their last argument, the signed output.
    """

    def __init__(self, product_out: Path) -> None:
        self.product_out = product_out
        self.targets: list[str] = []
        self.tool_calls: list[list[str]] = []
        self.envs: list[dict[str, str]] = []
        self.failing: set[str] = set()
        self.counter = 0

    def __call__(self, args: list[str], **kwargs: Any) -> MagicMock:
        if Path(args[0]).name in SIGNING_TOOLS:
            self.tool_calls.append(list(args))
            Path(args[-1]).write_bytes(b"signed")
            return MagicMock(returncode=0)

        target = args[-1]
        env = kwargs.get("env") or {}
        self.targets.append(target)
        self.envs.append(env)
        if target in self.failing:
            return MagicMock(returncode=2)

        self.counter += 1
        if target == "kosp":
            self._target_files()
            path = self.product_out / f"KOSP-{DEVICE}-2024010{self.counter}-1200.zip"
            path.write_bytes(b"\x5a" * 4096)
        elif target == "kosp-incremental":
            self._target_files()
            base = Path(env.get("PREVIOUS_TARGET_FILES_PACKAGE", "")).name
            path = self.product_out / f"KOSP-{DEVICE}-incremental-2024010{self.counter}.zip"
            with zipfile.ZipFile(path, "w") as zf:
                zf.writestr("payload.bin", b"\x01" * 512)
                zf.writestr(METADATA_ENTRY, f"ota-type=AB\npre-build-incremental={base}\n")
        elif target == "installclean":
            for stale in self.product_out.glob("KOSP-*.zip"):
                stale.unlink()
        return MagicMock(returncode=0)

    def _target_files(self) -> None:
        path = (
            self.product_out
            / "obj"
            / "PACKAGING"
            / "target_files_intermediates"
            / f"krypton_{DEVICE}-target_files-eng.zip"
        )
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(f"target files #{self.counter}".encode())


@pytest.fixture
def simulated_build(product_out: Path) -> SimulatedBuild:
    """Patch subprocess.run for the builder and signer with a simulated build.

    Both modules share the subprocess module, so one patch covers both.
    """
    build = SimulatedBuild(product_out)
    with patch("otabuild.builder.make.subprocess.run", side_effect=build):
        yield build
