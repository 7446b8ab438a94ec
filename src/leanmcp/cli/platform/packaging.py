"""Project packaging for upload."""

from __future__ import annotations

import io
import logging
import shutil
import zipfile
from dataclasses import dataclass
from pathlib import Path

from .config import MAX_ARCHIVE_MB
from .exceptions import EmptyInputError, FileAccessError, SizeLimitError
from .scanner import DirectoryScanner, FileEntry, ScanStats

logger = logging.getLogger(__name__)

_COPY_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class ArchiveResult:
    """An in-memory project archive."""

    data: bytes
    file_count: int
    total_size: int


class ProjectPackager:
    """Zips a project directory in memory.

    Args:
        project_path: Path to project root.
    """

    def __init__(self, project_path: str | Path):
        self.project_path = Path(project_path)
        self.scanner = DirectoryScanner(self.project_path)

    def build_archive(self) -> ArchiveResult:
        """Create a deflate zip of every non-ignored file.

        Entry names are the files' relative paths with ``/`` separators;
        headers carry each file's permission bits and modification time.

        Returns:
            Archive bytes with the manifest's file count and total size.

        Raises:
            EmptyInputError: If no files remain after ignore filtering.
            FileAccessError: If the directory or any file cannot be read.
        """
        files, stats = self.scanner.scan_files_only()
        if not files:
            raise EmptyInputError()

        buf = io.BytesIO()
        with zipfile.ZipFile(
            buf, "w", zipfile.ZIP_DEFLATED, strict_timestamps=False
        ) as zf:
            for entry in files:
                _add_file_to_zip(zf, entry)

        data = buf.getvalue()
        logger.debug(
            f"Archived {stats.total_files} files ({stats.total_size} bytes) "
            f"into {len(data)} bytes"
        )
        return ArchiveResult(
            data=data, file_count=stats.total_files, total_size=stats.total_size
        )

    def preview_files(self, limit: int) -> tuple[list[FileEntry], ScanStats]:
        """Preview the files that would be archived.

        Args:
            limit: Maximum number of entries returned.

        Returns:
            Tuple of (first ``limit`` files, stats for the whole scan).
        """
        return self.scanner.preview_files(limit)


def _add_file_to_zip(zf: zipfile.ZipFile, entry: FileEntry) -> None:
    """Stream a single file into the archive.

    Args:
        zf: Open zipfile.
        entry: Scanned file to add.
    """
    arcname = entry.rel_path.replace("\\", "/")
    try:
        with open(entry.path, "rb") as src:
            info = zipfile.ZipInfo.from_file(entry.path, arcname, strict_timestamps=False)
            info.compress_type = zipfile.ZIP_DEFLATED
            with zf.open(info, "w") as dest:
                shutil.copyfileobj(src, dest, _COPY_CHUNK_SIZE)
    except OSError as e:
        raise FileAccessError(
            entry.rel_path, f"failed to add file to zip ({e.strerror or e})"
        ) from e


def build_archive(project_path: str | Path) -> ArchiveResult:
    """Build the upload archive for a project directory."""
    return ProjectPackager(project_path).build_archive()


def validate_size(data: bytes, max_mb: int = MAX_ARCHIVE_MB) -> None:
    """Check an archive against the upload size limit.

    Args:
        data: Archive bytes.
        max_mb: Limit in MiB.

    Raises:
        SizeLimitError: If the archive is larger than ``max_mb`` MiB.
    """
    size = len(data)
    if size > max_mb * 1024 * 1024:
        raise SizeLimitError(size, max_mb)


def human_readable_size(num_bytes: int) -> str:
    """Format a byte count with binary units (e.g. "1.5 KB", "2.0 MB")."""
    unit = 1024
    if num_bytes < unit:
        return f"{num_bytes} B"
    div, exp = unit, 0
    n = num_bytes // unit
    while n >= unit:
        div *= unit
        exp += 1
        n //= unit
    return f"{num_bytes / div:.1f} {'KMGTPE'[exp]}B"
