"""Input validation for launch requests.

Validates:
- Device codename is non-empty
- Build variant is one lunch accepts
- Flag combinations are meaningful
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from otabuild.planner.intent import BuildIntent


VALID_VARIANTS = ("user", "userdebug", "eng")

# Codenames are used in lunch combos and file names
_DEVICE_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")


@dataclass
class ValidationResult:
    """Result of input validation."""

    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @staticmethod
    def success() -> ValidationResult:
        """Create a successful validation result."""
        return ValidationResult(valid=True, errors=[], warnings=[])

    @staticmethod
    def failure(errors: list[str]) -> ValidationResult:
        """Create a failed validation result."""
        return ValidationResult(valid=False, errors=errors, warnings=[])

    def add_error(self, error: str) -> None:
        """Add an error to the result."""
        self.errors.append(error)
        self.valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning to the result."""
        self.warnings.append(warning)

    def merge(self, other: ValidationResult) -> ValidationResult:
        """Merge another validation result into this one.

        Args:
            other: Another validation result

        Returns:
            Self for chaining
        """
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        if not other.valid:
            self.valid = False
        return self


def is_valid_variant(variant: str) -> bool:
    """Check whether a build variant is accepted by lunch."""
    return variant in VALID_VARIANTS


def validate_variant(variant: str) -> ValidationResult:
    """Validate a build variant.

    Args:
        variant: Variant passed on the command line

    Returns:
        ValidationResult
    """
    if is_valid_variant(variant):
        return ValidationResult.success()
    return ValidationResult.failure(
        [f"Invalid build variant '{variant}', expected one of: {', '.join(VALID_VARIANTS)}"]
    )


def validate_device(device: str) -> ValidationResult:
    """Validate a device codename.

    Args:
        device: Device codename

    Returns:
        ValidationResult
    """
    if not device or not device.strip():
        return ValidationResult.failure(["Device name must not be empty"])
    if not _DEVICE_PATTERN.match(device):
        return ValidationResult.failure(
            [f"Device name '{device}' may only contain letters, digits and underscores"]
        )
    return ValidationResult.success()


def validate_intent(intent: BuildIntent) -> ValidationResult:
    """Validate a complete launch request.

    Flag combinations that only lose meaning (build-both without a
    history directory) are warnings, not errors.

    Args:
        intent: The launch request

    Returns:
        ValidationResult
    """
    result = ValidationResult(valid=True)
    result.merge(validate_device(intent.device))
    result.merge(validate_variant(intent.variant))

    if intent.build_both and intent.history_dir is None:
        result.add_warning(
            "--build-both-targets only has an effect together with -i/--incremental"
        )

    if intent.history_dir is not None and intent.wipe_history:
        result.add_warning(
            f"All files in {intent.history_dir} will be deleted before copying new target files"
        )

    return result
