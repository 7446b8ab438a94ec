"""Ignore rules for project scanning.

Paths are relative to the scan root and always use ``/`` separators.
"""

from __future__ import annotations

import fnmatch
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

IGNORE_FILE_NAME = ".gitignore"

# Evaluated before any ignore-file rule
DEFAULT_EXCLUDES: tuple[str, ...] = (
    ".git",
    ".DS_Store",
    "*.log",
    "node_modules",
    ".env",
    ".env.local",
    ".env.production",
    ".env.development",
    "*.tmp",
    "*.temp",
    "dist",
    "build",
    "coverage",
    ".nyc_output",
    ".idea",
    ".vscode",
    "*.swp",
    "*.swo",
    "*~",
)

_WILDCARD_CHARS = frozenset("*?[")


def _basename(rel_path: str) -> str:
    return rel_path.rsplit("/", 1)[-1]


def _has_wildcard(rule: str) -> bool:
    return any(ch in _WILDCARD_CHARS for ch in rule)


def _match_pattern(pattern: str, rel_path: str) -> bool:
    """Match a plain or wildcard pattern against a relative path."""
    name = _basename(rel_path)
    if _has_wildcard(pattern):
        return fnmatch.fnmatchcase(name, pattern)
    return (
        pattern == rel_path
        or pattern == name
        or rel_path.startswith(pattern + "/")
    )


def matches(rule: str, rel_path: str, is_dir: bool) -> bool:
    """Check whether a single ignore rule matches a path.

    Args:
        rule: Ignore rule (built-in exclude or ignore-file line).
        rel_path: Slash-separated path relative to the scan root.
        is_dir: Whether the path is a directory.

    Returns:
        True if the rule excludes the path.
    """
    # Negation is recognized but not honoured
    if rule.startswith("!"):
        return False

    if rule.endswith("/"):
        if not is_dir:
            return False
        rule = rule.rstrip("/")
        if not rule:
            return False

    if rule.startswith("/"):
        rule = rule.lstrip("/")
        if not rule:
            return False
        if _has_wildcard(rule):
            return _match_pattern(rule, rel_path)
        return rel_path == rule or rel_path.startswith(rule + "/")

    return _match_pattern(rule, rel_path)


def parse_ignore_lines(lines: list[str]) -> list[str]:
    """Parse ignore-file lines, dropping blanks and ``#`` comments."""
    rules: list[str] = []
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        rules.append(line)
    return rules


def load_ignore_file(root: Path) -> list[str]:
    """Load rules from the ignore file at the scan root.

    Args:
        root: Scan root directory.

    Returns:
        Rules in file order; empty when the file is missing or unreadable.
    """
    ignore_path = root / IGNORE_FILE_NAME
    try:
        text = ignore_path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        return []
    except OSError as e:
        logger.warning(f"Could not read {ignore_path}: {e}")
        return []
    rules = parse_ignore_lines(text.splitlines())
    negations = [rule for rule in rules if rule.startswith("!")]
    if negations:
        logger.debug(f"Negation rules are not supported and will be skipped: {negations}")
    return rules


class IgnoreRules:
    """Ordered rule set: built-in excludes first, then ignore-file rules."""

    def __init__(
        self,
        file_rules: list[str] | None = None,
        defaults: tuple[str, ...] = DEFAULT_EXCLUDES,
    ) -> None:
        self.defaults = list(defaults)
        self.file_rules = list(file_rules or [])

    @classmethod
    def for_root(cls, root: Path) -> IgnoreRules:
        return cls(load_ignore_file(root))

    def __iter__(self):
        yield from self.defaults
        yield from self.file_rules

    def should_ignore(self, rel_path: str, is_dir: bool) -> bool:
        """Return True if any rule excludes the path (first match wins)."""
        return any(matches(rule, rel_path, is_dir) for rule in self)
