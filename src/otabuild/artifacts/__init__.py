"""Archive lookup, history rotation and release manifests."""

from otabuild.artifacts.checksums import file_digests, file_size
from otabuild.artifacts.history import (
    TIMESTAMP_FORMAT,
    HistoryStore,
    RotationResult,
    timestamped_name,
)
from otabuild.artifacts.locator import (
    INCREMENTAL_MARKER,
    TARGET_FILES_PATTERN,
    ArchiveKind,
    TargetFilesArchive,
    classify,
    find_first,
    find_latest,
    list_archives,
)
from otabuild.artifacts.manifest import (
    FULL_MANIFEST_FILENAME,
    INCREMENTAL_MANIFEST_FILENAME,
    DownloadSources,
    FullManifest,
    GeneratedManifests,
    IncrementalManifest,
    ManifestGenerator,
    write_manifest_file,
)
from otabuild.artifacts.metadata import (
    METADATA_ENTRY,
    get_pre_build_incremental,
    parse_metadata,
    read_package_metadata,
)

__all__ = [
    # Locator
    "ArchiveKind",
    "TargetFilesArchive",
    "TARGET_FILES_PATTERN",
    "INCREMENTAL_MARKER",
    "classify",
    "list_archives",
    "find_latest",
    "find_first",
    # History
    "HistoryStore",
    "RotationResult",
    "TIMESTAMP_FORMAT",
    "timestamped_name",
    # Checksums
    "file_digests",
    "file_size",
    # Package metadata
    "METADATA_ENTRY",
    "parse_metadata",
    "read_package_metadata",
    "get_pre_build_incremental",
    # Manifests
    "ManifestGenerator",
    "FullManifest",
    "IncrementalManifest",
    "DownloadSources",
    "GeneratedManifests",
    "FULL_MANIFEST_FILENAME",
    "INCREMENTAL_MANIFEST_FILENAME",
    "write_manifest_file",
]
