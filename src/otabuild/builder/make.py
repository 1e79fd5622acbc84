"""Builder backed by the Soong build driver."""

import os
import subprocess
from pathlib import Path

from otabuild.builder.protocols import BuildResult
from otabuild.core.logging import get_logger
from otabuild.core.timing import Timer

SOONG_UI_RELPATH = Path("build") / "soong" / "soong_ui.bash"

CLEAN_TARGET = "clean"
INSTALL_CLEAN_TARGET = "installclean"


def lunch_combo(lunch_prefix: str, device: str, variant: str) -> str:
    """Build the lunch combo for a device, e.g. "krypton_guacamole-userdebug"."""
    return f"{lunch_prefix}_{device}-{variant}"


def split_lunch_combo(combo: str) -> tuple[str, str]:
    """Split a lunch combo into (product, variant).

    Raises:
        ValueError: If the combo has no variant part.
    """
    product, sep, variant = combo.rpartition("-")
    if not sep or not product or not variant:
        raise ValueError(f"Invalid lunch combo: {combo}")
    return product, variant


class MakeBuilder:
    """Runs `soong_ui.bash --make-mode <target>` in the source tree.

    The lunch selection is passed as TARGET_PRODUCT / TARGET_BUILD_VARIANT,
    which is what lunch exports. Each call blocks until the build exits;
    build output goes straight to the terminal.
    """

    def __init__(
        self,
        build_top: Path,
        combo: str,
        extra_env: dict[str, str] | None = None,
    ) -> None:
        """Initialize the builder.

        Args:
            build_top: Root of the Android source tree.
            combo: Lunch combo, e.g. "krypton_guacamole-userdebug".
            extra_env: Variables added to every build invocation.
        """
        self.build_top = build_top
        self.combo = combo
        self.product, self.variant = split_lunch_combo(combo)
        self.extra_env = dict(extra_env or {})
        self._logger = get_logger("builder")

    def command(self, target: str) -> list[str]:
        """Get the command line that builds a target."""
        return [str(self.build_top / SOONG_UI_RELPATH), "--make-mode", target]

    def environment(self, env: dict[str, str] | None = None) -> dict[str, str]:
        """Get the full environment for a build invocation."""
        merged = dict(os.environ)
        merged.update(
            {
                "ANDROID_BUILD_TOP": str(self.build_top),
                "TARGET_PRODUCT": self.product,
                "TARGET_BUILD_VARIANT": self.variant,
            }
        )
        merged.update(self.extra_env)
        if env:
            merged.update(env)
        return merged

    def build(self, target: str, env: dict[str, str] | None = None) -> BuildResult:
        """Build a target.

        Args:
            target: Make target name.
            env: Additional environment for this invocation.

        Returns:
            BuildResult; a missing build driver is reported as exit code 127.
        """
        self._logger.debug("Building target", target=target, combo=self.combo)
        with Timer() as timer:
            try:
                completed = subprocess.run(
                    self.command(target),
                    cwd=self.build_top,
                    env=self.environment(env),
                    check=False,
                )
                exit_code = completed.returncode
            except FileNotFoundError:
                self._logger.error(
                    "Build driver not found", path=str(self.build_top / SOONG_UI_RELPATH)
                )
                exit_code = 127

        return BuildResult(
            target=target,
            success=exit_code == 0,
            exit_code=exit_code,
            duration_ms=timer.duration_ms,
        )

    def clean(self) -> BuildResult:
        """Run `m clean`."""
        return self.build(CLEAN_TARGET)

    def install_clean(self) -> BuildResult:
        """Run `m installclean`."""
        return self.build(INSTALL_CLEAN_TARGET)
