"""Release signing through the AOSP releasetools."""

import subprocess
from pathlib import Path

from otabuild.builder.protocols import Builder, SignResult
from otabuild.core.logging import get_logger

HOST_BIN_RELPATH = Path("out") / "host" / "linux-x86" / "bin"

SIGN_TOOL_TARGET = "sign_target_files_apks"

SIGNED_TARGET_FILES_NAME = "signed-target_files.zip"
SIGNED_OTA_NAME = "signed-ota_update.zip"

RELEASE_KEY_NAME = "releasekey"


class ReleaseSigner:
    """Re-signs target files and generates a signed OTA package.

    Steps:
    1. Build the sign_target_files_apks host tool
    2. sign_target_files_apks -o -d <keys> <target-files> signed-target_files.zip
    3. ota_from_target_files -k <keys>/releasekey signed-target_files.zip signed-ota_update.zip

    Signed outputs are written to the working directory (the source root)
    and replaced on every call.
    """

    def __init__(
        self,
        build_top: Path,
        builder: Builder,
        work_dir: Path | None = None,
    ) -> None:
        """Initialize the signer.

        Args:
            build_top: Root of the Android source tree.
            builder: Builder used to build the signing host tool.
            work_dir: Where signed outputs go; defaults to build_top.
        """
        self.build_top = build_top
        self.builder = builder
        self.work_dir = work_dir or build_top
        self._logger = get_logger("signer")

    @property
    def host_bin(self) -> Path:
        """Directory holding the host releasetools binaries."""
        return self.build_top / HOST_BIN_RELPATH

    def _run(self, args: list[str]) -> int:
        try:
            return subprocess.run(args, cwd=self.work_dir, check=False).returncode
        except FileNotFoundError:
            self._logger.error("Signing tool not found", tool=args[0])
            return 127

    def sign(self, target_files: Path, key_dir: Path) -> SignResult:
        """Sign a target-files package.

        Args:
            target_files: Unsigned target-files package.
            key_dir: Directory holding the release keys.

        Returns:
            SignResult with the signed outputs, or a failure message.
        """
        signed_target_files = self.work_dir / SIGNED_TARGET_FILES_NAME
        signed_ota = self.work_dir / SIGNED_OTA_NAME
        for stale in (signed_target_files, signed_ota):
            stale.unlink(missing_ok=True)

        tool = self.builder.build(SIGN_TOOL_TARGET)
        if not tool.success:
            return SignResult(
                success=False,
                message=f"Failed to build {SIGN_TOOL_TARGET} (exit code {tool.exit_code})",
            )

        exit_code = self._run(
            [
                str(self.host_bin / "sign_target_files_apks"),
                "-o",
                "-d",
                str(key_dir),
                str(target_files),
                str(signed_target_files),
            ]
        )
        if exit_code != 0:
            return SignResult(
                success=False,
                message=f"sign_target_files_apks failed with exit code {exit_code}",
            )

        exit_code = self._run(
            [
                str(self.host_bin / "ota_from_target_files"),
                "-k",
                str(key_dir / RELEASE_KEY_NAME),
                str(signed_target_files),
                str(signed_ota),
            ]
        )
        if exit_code != 0:
            return SignResult(
                success=False,
                signed_target_files=signed_target_files,
                message=f"ota_from_target_files failed with exit code {exit_code}",
            )

        return SignResult(
            success=True,
            signed_target_files=signed_target_files,
            signed_ota=signed_ota,
        )
