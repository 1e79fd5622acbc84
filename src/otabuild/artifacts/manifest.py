"""Release manifest generation for full and incremental OTA packages.

Two independent JSON documents may be produced per build:

    <json_root>/<build_id>/ota.json              full package
    <json_root>/<build_id>/incremental_ota.json  incremental package

The full manifest repeats file name and size under both the old
(filename, filesize) and new (file_name, file_size) keys so that older
updater clients keep working.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from otabuild.artifacts.checksums import file_digests, file_size
from otabuild.artifacts.locator import ArchiveKind, TargetFilesArchive, find_latest
from otabuild.artifacts.metadata import get_pre_build_incremental
from otabuild.config.env import ENV_BUILD_ID
from otabuild.config.props import (
    PROP_BUILD_DATE_UTC,
    PROP_VERSION,
    get_prop_value,
    read_props,
)
from otabuild.config.schema import ReleaseConfig
from otabuild.core.logging import get_logger
from otabuild.exceptions import (
    ArtifactNotFoundError,
    InvalidRequestError,
    ManifestError,
    MissingPropertyError,
    OutputDirError,
)

FULL_MANIFEST_FILENAME = "ota.json"
INCREMENTAL_MANIFEST_FILENAME = "incremental_ota.json"

DEFAULT_PRODUCT_PREFIX = "KOSP"


@dataclass
class DownloadSources:
    """Mirrored download locations of a package."""

    primary: str
    secondary: str

    def to_dict(self) -> dict[str, str]:
        """Convert to the updater's download_sources mapping."""
        return {
            "OneDrive": self.primary,
            "Sourceforge": self.secondary,
        }


@dataclass
class FullManifest:
    """Manifest describing a full OTA package."""

    version: str
    date: int
    url: str
    download_sources: DownloadSources
    file_name: str
    file_size: int
    md5: str
    sha_512: str

    def to_dict(self) -> dict[str, Any]:
        """Convert manifest to dictionary for JSON serialization."""
        return {
            "version": self.version,
            "date": str(self.date),
            "url": self.url,
            "download_sources": self.download_sources.to_dict(),
            "filename": self.file_name,
            "file_name": self.file_name,
            "filesize": str(self.file_size),
            "file_size": str(self.file_size),
            "md5": self.md5,
            "sha_512": self.sha_512,
        }


@dataclass
class IncrementalManifest:
    """Manifest describing an incremental OTA package."""

    version: str
    date: int
    url: str
    download_sources: DownloadSources
    file_name: str
    file_size: int
    sha_512: str
    pre_build_incremental: str

    def to_dict(self) -> dict[str, Any]:
        """Convert manifest to dictionary for JSON serialization."""
        return {
            "version": self.version,
            "date": str(self.date),
            "url": self.url,
            "download_sources": self.download_sources.to_dict(),
            "file_name": self.file_name,
            "file_size": str(self.file_size),
            "sha_512": self.sha_512,
            "pre_build_incremental": self.pre_build_incremental,
        }


@dataclass
class GeneratedManifests:
    """Manifests written by one generate() call."""

    full: FullManifest | None = None
    full_path: Path | None = None
    incremental: IncrementalManifest | None = None
    incremental_path: Path | None = None

    @property
    def paths(self) -> list[Path]:
        """Paths of every manifest written, incremental first."""
        return [p for p in (self.incremental_path, self.full_path) if p is not None]


def write_manifest_file(path: Path, data: dict[str, Any]) -> Path:
    """Write a manifest dictionary as indented UTF-8 JSON.

    Args:
        path: Destination file; parent directories are created.
        data: Manifest dictionary.

    Returns:
        The path written.

    Raises:
        ManifestError: If writing fails.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=4) + "\n", encoding="utf-8")
    except OSError as e:
        raise ManifestError(f"Failed to write manifest {path}: {e}") from e
    return path


class ManifestGenerator:
    """Builds release manifests from the packages in an output directory.

    Build properties come either from an explicit mapping or from a
    build.prop file read when generate() runs.
    """

    def __init__(
        self,
        json_root: Path,
        prop_file: Path | None = None,
        props: dict[str, str] | None = None,
        release: ReleaseConfig | None = None,
        product_prefix: str = DEFAULT_PRODUCT_PREFIX,
    ) -> None:
        """Initialize the generator.

        Args:
            json_root: Directory under which <build_id>/ manifest dirs are created.
            prop_file: build.prop to read version and build date from.
            props: Already parsed properties; take precedence over prop_file.
            release: Branch and mirror hosts used for download URLs.
            product_prefix: File name prefix of released packages.
        """
        self.json_root = json_root
        self.prop_file = prop_file
        self.release = release or ReleaseConfig()
        self.product_prefix = product_prefix
        self._props = props
        self._logger = get_logger("manifest")

    def _resolve_props(self) -> dict[str, str]:
        if self._props is not None:
            return self._props
        if self.prop_file is None:
            raise MissingPropertyError("No build.prop available to read build properties from")
        return read_props(self.prop_file)

    def _build_date_ms(self, props: dict[str, str]) -> int:
        raw = get_prop_value(props, PROP_BUILD_DATE_UTC)
        try:
            return int(raw) * 1000
        except ValueError as e:
            raise MissingPropertyError(
                f"Build property {PROP_BUILD_DATE_UTC} is not an integer: {raw!r}",
                PROP_BUILD_DATE_UTC,
            ) from e

    def download_sources(self, build_id: str, file_name: str) -> DownloadSources:
        """Build the mirrored download URLs for a package.

        Args:
            build_id: Device build identifier.
            file_name: Package file name.

        Returns:
            DownloadSources for the primary and secondary hosts.
        """
        branch = self.release.branch
        return DownloadSources(
            primary=f"{self.release.primary_url}/{branch}/{build_id}/{file_name}",
            secondary=f"{self.release.secondary_url}/{branch}/{build_id}/{file_name}",
        )

    def package_pattern(self, build_id: str) -> str:
        """Glob pattern released package names for a build follow."""
        return f"{self.product_prefix}*{build_id}*.zip"

    def find_packages(
        self, output_dir: Path, build_id: str
    ) -> tuple[TargetFilesArchive | None, TargetFilesArchive | None]:
        """Find the newest full and newest incremental package independently.

        Returns:
            Tuple of (full, incremental); either may be None.
        """
        pattern = self.package_pattern(build_id)
        full = find_latest(output_dir, ArchiveKind.FULL, pattern=pattern, recursive=True)
        incremental = find_latest(
            output_dir, ArchiveKind.INCREMENTAL, pattern=pattern, recursive=True
        )
        return full, incremental

    def build_full_manifest(
        self,
        package: Path,
        build_id: str,
        version: str,
        date_ms: int,
    ) -> FullManifest:
        """Describe a full package, computing MD5 and SHA-512."""
        digests = file_digests(package, ("md5", "sha512"))
        sources = self.download_sources(build_id, package.name)
        return FullManifest(
            version=version,
            date=date_ms,
            url=sources.primary,
            download_sources=sources,
            file_name=package.name,
            file_size=file_size(package),
            md5=digests["md5"],
            sha_512=digests["sha512"],
        )

    def build_incremental_manifest(
        self,
        package: Path,
        build_id: str,
        version: str,
        date_ms: int,
    ) -> IncrementalManifest:
        """Describe an incremental package, chaining it to its base build."""
        digests = file_digests(package, ("sha512",))
        sources = self.download_sources(build_id, package.name)
        return IncrementalManifest(
            version=version,
            date=date_ms,
            url=sources.primary,
            download_sources=sources,
            file_name=package.name,
            file_size=file_size(package),
            sha_512=digests["sha512"],
            pre_build_incremental=get_pre_build_incremental(package),
        )

    def generate(
        self,
        output_dir: Path,
        build_id: str,
        want_incremental: bool = False,
        want_both: bool = False,
    ) -> GeneratedManifests:
        """Generate and write the manifest(s) for a build.

        Args:
            output_dir: Directory holding the built OTA packages.
            build_id: Device build identifier (KRYPTON_BUILD).
            want_incremental: Describe the incremental package.
            want_both: Also describe the full package; requires want_incremental.

        Returns:
            GeneratedManifests with the documents and the paths written.

        Raises:
            InvalidRequestError: If want_both is set without want_incremental.
            OutputDirError: If output_dir is not a directory.
            MissingPropertyError: If the build id or a build property is missing.
            ArchiveIOError: If build.prop exists but cannot be read.
            ArtifactNotFoundError: If a required package is not present.
            ManifestError: If package metadata cannot be read or writing fails.
        """
        if want_both and not want_incremental:
            raise InvalidRequestError("Both targets cannot exist if not incremental")

        if not output_dir.is_dir():
            raise OutputDirError(f"Output dir {output_dir} doesn't exist", output_dir)

        if not build_id:
            raise MissingPropertyError(
                f"{ENV_BUILD_ID} is not set, have you run lunch?", ENV_BUILD_ID
            )

        props = self._resolve_props()
        version = get_prop_value(props, PROP_VERSION)
        date_ms = self._build_date_ms(props)

        full, incremental = self.find_packages(output_dir, build_id)
        need_full = want_both or not want_incremental

        # Check everything needed before writing anything
        if need_full and full is None:
            raise ArtifactNotFoundError("OTA file not found!", output_dir)
        if want_incremental and incremental is None:
            raise ArtifactNotFoundError("Incremental OTA file not found!", output_dir)

        device_dir = self.json_root / build_id
        result = GeneratedManifests()

        if want_incremental and incremental is not None:
            result.incremental = self.build_incremental_manifest(
                incremental.path, build_id, version, date_ms
            )
            result.incremental_path = write_manifest_file(
                device_dir / INCREMENTAL_MANIFEST_FILENAME, result.incremental.to_dict()
            )
            self._logger.log_manifest_written(
                "incremental", str(result.incremental_path), incremental.name
            )
            if not want_both:
                return result

        if full is not None:
            result.full = self.build_full_manifest(full.path, build_id, version, date_ms)
            result.full_path = write_manifest_file(
                device_dir / FULL_MANIFEST_FILENAME, result.full.to_dict()
            )
            self._logger.log_manifest_written("full", str(result.full_path), full.name)

        return result
