"""Exclude patterns for tree comparison.

This module provides:
- IgnorePatterns: gitignore-style matching of paths under a root
- DEFAULT_IGNORE_PATTERNS: Entries never mirrored into a workspace
"""

from __future__ import annotations

import fnmatch
from collections.abc import Iterable

# Marker directory used by assetsync itself plus common OS clutter
DEFAULT_IGNORE_PATTERNS = [
    ".assetsync",
    ".git",
    ".DS_Store",
    "Thumbs.db",
    "desktop.ini",
]


class IgnorePatterns:
    """Matches relative paths against exclude patterns."""

    def __init__(self, patterns: Iterable[str] | None = None, defaults: bool = True) -> None:
        """Initialize with patterns.

        Args:
            patterns: Extra gitignore-style patterns.
            defaults: Whether to start from DEFAULT_IGNORE_PATTERNS.
        """
        self._patterns = list(DEFAULT_IGNORE_PATTERNS) if defaults else []
        if patterns:
            self._patterns.extend(patterns)

    def matches(self, rel_path: str, is_dir: bool = False) -> bool:
        """Check a forward-slash relative path against the patterns.

        A pattern without a slash matches the entry name; a pattern with a
        slash matches the whole relative path. A trailing slash restricts
        the pattern to directories.
        """
        name = rel_path.rsplit("/", 1)[-1]
        for pattern in self._patterns:
            if pattern.endswith("/"):
                if not is_dir:
                    continue
                pattern = pattern[:-1]
            if "/" in pattern:
                if fnmatch.fnmatch(rel_path, pattern):
                    return True
            elif fnmatch.fnmatch(name, pattern):
                return True
        return False
