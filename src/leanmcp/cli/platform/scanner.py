"""Directory scanning with ignore-rule pruning."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .exceptions import FileAccessError
from .ignore import IgnoreRules

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileEntry:
    """A file or directory found during a scan."""

    path: str
    rel_path: str
    size: int
    is_dir: bool
    mode: int


@dataclass
class ScanStats:
    """Aggregate counts for a scan."""

    total_files: int = 0
    total_size: int = 0
    total_dirs: int = 0

    def add(self, entry: FileEntry) -> None:
        if entry.is_dir:
            self.total_dirs += 1
        else:
            self.total_files += 1
            self.total_size += entry.size


def validate_directory(path: str | Path) -> Path:
    """Check that a path is an existing, readable directory.

    Args:
        path: Candidate project directory.

    Returns:
        The path as a ``Path``.

    Raises:
        FileAccessError: If the path is missing, not a directory or unreadable.
    """
    directory = Path(path)
    if not directory.exists():
        raise FileAccessError(str(directory), "directory does not exist")
    if not directory.is_dir():
        raise FileAccessError(str(directory), "path is not a directory")
    try:
        with os.scandir(directory):
            pass
    except OSError as e:
        raise FileAccessError(str(directory), f"cannot read directory ({e.strerror})") from e
    return directory


class DirectoryScanner:
    """Walks a project directory depth-first, honouring ignore rules.

    Ignored directories are pruned without being listed, so large excluded
    trees such as ``node_modules`` cost nothing to skip.

    Args:
        root_path: Directory to scan.
        rules: Ignore rules; loaded from the root's ignore file when omitted.
    """

    def __init__(self, root_path: str | Path, rules: IgnoreRules | None = None):
        self.root_path = Path(root_path)
        self.rules = rules if rules is not None else IgnoreRules.for_root(self.root_path)

    def scan(self) -> tuple[list[FileEntry], ScanStats]:
        """Scan the whole tree.

        Returns:
            Tuple of (entries in traversal order, stats).

        Raises:
            FileAccessError: If the root or a visited directory is unreadable.
        """
        entries: list[FileEntry] = []
        stats = ScanStats()
        self._walk(self.root_path, "", entries, stats)
        logger.debug(
            f"Scanned {self.root_path}: {stats.total_files} files, "
            f"{stats.total_dirs} dirs, {stats.total_size} bytes"
        )
        return entries, stats

    def _walk(
        self, directory: Path, prefix: str, entries: list[FileEntry], stats: ScanStats
    ) -> None:
        try:
            with os.scandir(directory) as it:
                children = sorted(it, key=lambda e: e.name)
        except OSError as e:
            raise FileAccessError(
                str(directory), f"failed to scan directory ({e.strerror or e})"
            ) from e

        for child in children:
            rel_path = f"{prefix}{child.name}"
            try:
                is_dir = child.is_dir(follow_symlinks=False)
                st = child.stat(follow_symlinks=False)
            except OSError as e:
                raise FileAccessError(child.path, f"failed to stat ({e.strerror or e})") from e

            if self.rules.should_ignore(rel_path, is_dir):
                continue

            entry = FileEntry(
                path=child.path,
                rel_path=rel_path,
                size=st.st_size,
                is_dir=is_dir,
                mode=st.st_mode,
            )
            entries.append(entry)
            stats.add(entry)

            if is_dir:
                self._walk(Path(child.path), f"{rel_path}/", entries, stats)

    def scan_files_only(self) -> tuple[list[FileEntry], ScanStats]:
        """Scan and keep only regular files.

        File count and size are recomputed over the files; the directory
        count is carried over from the full scan.
        """
        all_entries, full_stats = self.scan()
        files = [entry for entry in all_entries if not entry.is_dir]
        stats = ScanStats(total_dirs=full_stats.total_dirs)
        for entry in files:
            stats.add(entry)
        return files, stats

    def preview_files(self, limit: int) -> tuple[list[FileEntry], ScanStats]:
        """Return at most ``limit`` files; stats still cover the full scan."""
        files, stats = self.scan_files_only()
        return files[: max(limit, 0)], stats
