"""Exception hierarchy for OTA build orchestration.

Errors fall into four groups:
- Input errors (bad flag combinations, missing properties or directories)
- Not-found errors, raised only when a request requires the artifact
- Collaborator failures (builder or signer returned failure)
- Archive I/O failures (copy, checksum, read)
"""

from enum import Enum
from pathlib import Path


class OtaErrorType(Enum):
    """Types of OTA build errors."""

    INVALID_REQUEST = "invalid_request"
    OUTPUT_DIR = "output_dir"
    MISSING_PROPERTY = "missing_property"
    INVALID_VARIANT = "invalid_variant"
    ARTIFACT_NOT_FOUND = "artifact_not_found"
    BUILD_FAILED = "build_failed"
    SIGNING_FAILED = "signing_failed"
    ARCHIVE_IO = "archive_io"
    MANIFEST = "manifest"
    UNKNOWN = "unknown"


class OtaBuildError(Exception):
    """Base exception for all OTA build errors."""

    def __init__(
        self,
        message: str,
        error_type: OtaErrorType = OtaErrorType.UNKNOWN,
    ) -> None:
        """Initialize OtaBuildError.

        Args:
            message: Error message.
            error_type: Type of error.
        """
        super().__init__(message)
        self.error_type = error_type


class InvalidRequestError(OtaBuildError):
    """Invalid combination of request flags."""

    def __init__(self, message: str) -> None:
        super().__init__(message, OtaErrorType.INVALID_REQUEST)


class OutputDirError(OtaBuildError):
    """Output directory is missing or unusable."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message, OtaErrorType.OUTPUT_DIR)
        self.path = path


class MissingPropertyError(OtaBuildError):
    """A required build property could not be resolved."""

    def __init__(self, message: str, prop_name: str = "") -> None:
        super().__init__(message, OtaErrorType.MISSING_PROPERTY)
        self.prop_name = prop_name


class InvalidVariantError(OtaBuildError):
    """Unknown build variant passed to lunch."""

    def __init__(self, variant: str) -> None:
        super().__init__(f"Invalid build variant: {variant}", OtaErrorType.INVALID_VARIANT)
        self.variant = variant


class ArtifactNotFoundError(OtaBuildError):
    """A required archive was not found.

    Only raised when the caller's request needs the artifact to exist.
    Lookups that may legitimately come back empty return None instead.
    """

    def __init__(self, message: str, directory: Path | None = None) -> None:
        super().__init__(message, OtaErrorType.ARTIFACT_NOT_FOUND)
        self.directory = directory


class BuildFailedError(OtaBuildError):
    """The external builder reported failure for a target."""

    def __init__(self, target: str, exit_code: int) -> None:
        """Initialize BuildFailedError.

        Args:
            target: Build target that failed.
            exit_code: Exit code reported by the builder.
        """
        super().__init__(
            f"Build of target '{target}' failed with exit code {exit_code}",
            OtaErrorType.BUILD_FAILED,
        )
        self.target = target
        self.exit_code = exit_code


class SigningFailedError(OtaBuildError):
    """The external signer reported failure."""

    def __init__(self, message: str, target: str = "") -> None:
        super().__init__(message, OtaErrorType.SIGNING_FAILED)
        self.target = target


class ArchiveIOError(OtaBuildError):
    """File operation on an archive failed."""

    def __init__(self, path: Path, operation: str, cause: OSError) -> None:
        """Initialize ArchiveIOError.

        Args:
            path: File the operation was applied to.
            operation: Short name of the operation (copy, checksum, read).
            cause: Underlying OS error.
        """
        super().__init__(
            f"Failed to {operation} {path}: {cause}",
            OtaErrorType.ARCHIVE_IO,
        )
        self.path = path
        self.operation = operation


class ManifestError(OtaBuildError):
    """Error reading archive metadata or writing a manifest."""

    def __init__(self, message: str) -> None:
        super().__init__(message, OtaErrorType.MANIFEST)
