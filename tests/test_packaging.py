"""Tests for leanmcp.cli.platform.packaging module."""

import io
import zipfile

import pytest

from leanmcp.cli.platform.exceptions import EmptyInputError, FileAccessError, SizeLimitError
from leanmcp.cli.platform.packaging import (
    ProjectPackager,
    build_archive,
    human_readable_size,
    validate_size,
)

MIB = 1024 * 1024


class _FakeBytes:
    """Stands in for a large archive without allocating it."""

    def __init__(self, size: int):
        self._size = size

    def __len__(self) -> int:
        return self._size


class TestBuildArchive:
    """Tests for archive creation."""

    def test_round_trip(self, project_dir):
        """Archive entries reproduce the scanned files byte for byte."""
        result = ProjectPackager(project_dir).build_archive()

        with zipfile.ZipFile(io.BytesIO(result.data)) as zf:
            names = zf.namelist()
            assert names == ["README.md", "package.json", "src/index.ts", "src/util.ts"]
            for name in names:
                assert zf.read(name) == (project_dir / name).read_bytes()
            assert all(
                info.compress_type == zipfile.ZIP_DEFLATED for info in zf.infolist()
            )

        assert result.file_count == 4
        assert result.total_size == sum(
            (project_dir / n).stat().st_size for n in names
        )

    def test_ignored_files_excluded(self, project_dir):
        """Built-in excludes never reach the archive."""
        result = build_archive(project_dir)
        with zipfile.ZipFile(io.BytesIO(result.data)) as zf:
            names = zf.namelist()
        assert not any(n.startswith("node_modules") for n in names)
        assert ".env" not in names
        assert "debug.log" not in names

    def test_permissions_preserved(self, tmp_path):
        """Entry headers carry the file's permission bits."""
        script = tmp_path / "run.sh"
        script.write_text("#!/bin/sh\necho hi\n")
        script.chmod(0o755)

        result = build_archive(tmp_path)
        with zipfile.ZipFile(io.BytesIO(result.data)) as zf:
            info = zf.getinfo("run.sh")
        assert (info.external_attr >> 16) & 0o777 == 0o755

    def test_only_ignored_files_raises(self, tmp_path):
        """A tree with nothing but ignored files cannot be archived."""
        (tmp_path / "node_modules").mkdir()
        (tmp_path / "node_modules" / "a.js").write_text("x")
        (tmp_path / "app.log").write_text("x")

        with pytest.raises(EmptyInputError):
            build_archive(tmp_path)

    def test_empty_directory_raises(self, tmp_path):
        """An empty directory cannot be archived."""
        with pytest.raises(EmptyInputError, match="no files found to zip"):
            build_archive(tmp_path)

    def test_missing_directory_raises(self, tmp_path):
        """A missing project directory is reported as an access error."""
        with pytest.raises(FileAccessError):
            build_archive(tmp_path / "missing")

    def test_preview_files(self, project_dir):
        """Preview returns the first files with full-tree stats."""
        files, stats = ProjectPackager(project_dir).preview_files(1)
        assert [f.rel_path for f in files] == ["README.md"]
        assert stats.total_files == 4


class TestValidateSize:
    """Tests for the archive size limit."""

    def test_at_limit_accepted(self):
        """Exactly 500 MiB is allowed."""
        validate_size(_FakeBytes(500 * MIB))

    def test_over_limit_rejected(self):
        """One byte over 500 MiB is rejected."""
        with pytest.raises(SizeLimitError) as exc_info:
            validate_size(_FakeBytes(500 * MIB + 1))
        assert exc_info.value.size == 500 * MIB + 1
        assert exc_info.value.max_mb == 500

    def test_custom_limit(self):
        """The limit can be lowered."""
        with pytest.raises(SizeLimitError):
            validate_size(b"x" * (MIB + 1), max_mb=1)
        validate_size(b"x" * MIB, max_mb=1)


class TestHumanReadableSize:
    """Tests for size formatting."""

    @pytest.mark.parametrize(
        "size,expected",
        [
            (0, "0 B"),
            (512, "512 B"),
            (1024, "1.0 KB"),
            (1536, "1.5 KB"),
            (5 * MIB, "5.0 MB"),
            (3 * 1024 * MIB, "3.0 GB"),
        ],
    )
    def test_formats(self, size, expected):
        """Sizes use binary units with one decimal."""
        assert human_readable_size(size) == expected
