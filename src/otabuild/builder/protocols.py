"""Capability interfaces for the external build and signing tools."""

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


@dataclass
class BuildResult:
    """Result of building a single target.

    Attributes:
        target: The target that was built.
        success: Whether the build succeeded.
        exit_code: Exit code reported by the build system.
        duration_ms: Duration in milliseconds.
    """

    target: str
    success: bool
    exit_code: int = 0
    duration_ms: int = 0


@dataclass
class SignResult:
    """Result of signing a target-files package.

    Attributes:
        success: Whether both signing steps succeeded.
        signed_target_files: Re-signed target-files package.
        signed_ota: OTA package generated from the signed target files.
        message: Failure description, empty on success.
    """

    success: bool
    signed_target_files: Path | None = None
    signed_ota: Path | None = None
    message: str = ""


class Builder(Protocol):
    """Builds named targets into the output directory."""

    def build(self, target: str, env: dict[str, str] | None = None) -> BuildResult:
        """Build a target and wait for it to finish."""
        ...

    def clean(self) -> BuildResult:
        """Remove all build output."""
        ...

    def install_clean(self) -> BuildResult:
        """Remove installed files, keeping intermediates."""
        ...


class Signer(Protocol):
    """Signs a target-files package with release keys."""

    def sign(self, target_files: Path, key_dir: Path) -> SignResult:
        """Sign target files and produce a signed OTA package."""
        ...
