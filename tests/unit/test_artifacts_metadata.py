"""Tests for OTA package metadata extraction."""

import zipfile
from pathlib import Path

import pytest

from otabuild.artifacts.metadata import (
    METADATA_ENTRY,
    get_pre_build_incremental,
    parse_metadata,
    read_package_metadata,
)
from otabuild.exceptions import ManifestError


def _package(path: Path, metadata: str | None) -> Path:
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("payload.bin", b"\x00" * 16)
        if metadata is not None:
            zf.writestr(METADATA_ENTRY, metadata)
    return path


class TestParseMetadata:
    """Tests for parse_metadata function."""

    def test_parses_key_value_lines(self) -> None:
        """Each key=value line becomes an entry."""
        content = "ota-type=BLOCK\npre-build-incremental=eng.builder.20231201\n"

        metadata = parse_metadata(content)

        assert metadata == {
            "ota-type": "BLOCK",
            "pre-build-incremental": "eng.builder.20231201",
        }

    def test_ignores_lines_without_separator(self) -> None:
        """Lines without '=' are skipped."""
        assert parse_metadata("garbage\nkey=value") == {"key": "value"}

    def test_value_may_contain_equals(self) -> None:
        """Only the first '=' separates key and value."""
        assert parse_metadata("post-build=a/b:12/c=d") == {"post-build": "a/b:12/c=d"}


class TestReadPackageMetadata:
    """Tests for reading metadata out of a package."""

    def test_reads_entry(self, tmp_path: Path) -> None:
        """The metadata entry is read from the zip."""
        package = _package(tmp_path / "ota.zip", "pre-build-incremental=1234\n")

        assert read_package_metadata(package) == {"pre-build-incremental": "1234"}

    def test_missing_entry_is_empty(self, tmp_path: Path) -> None:
        """A package without metadata yields an empty mapping."""
        package = _package(tmp_path / "ota.zip", None)

        assert read_package_metadata(package) == {}

    def test_not_a_zip(self, tmp_path: Path) -> None:
        """Unreadable packages raise ManifestError."""
        package = tmp_path / "ota.zip"
        package.write_bytes(b"not a zip")

        with pytest.raises(ManifestError):
            read_package_metadata(package)


class TestGetPreBuildIncremental:
    """Tests for get_pre_build_incremental function."""

    def test_returns_value(self, tmp_path: Path) -> None:
        """The base build's incremental id is returned."""
        package = _package(
            tmp_path / "ota.zip",
            "ota-type=BLOCK\npre-build-incremental=eng.builder.20231201.120000\n",
        )

        assert get_pre_build_incremental(package) == "eng.builder.20231201.120000"

    def test_missing_key_is_empty_string(self, tmp_path: Path) -> None:
        """A package that does not record the key yields ''."""
        package = _package(tmp_path / "ota.zip", "ota-type=BLOCK\n")

        assert get_pre_build_incremental(package) == ""
