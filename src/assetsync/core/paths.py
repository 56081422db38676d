"""Path resolution for workspace and remote roots.

This module provides:
- normalize_relative: Validate and normalize a user/remote supplied path
- safe_join: Join a relative path to a root without escaping it
- PathResolver: Map task relative paths to absolute local/remote paths
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from assetsync.core.config import WorkspaceConfig
from assetsync.core.errors import PathTraversalError


def normalize_relative(relative_path: str) -> str:
    """Normalize a relative path to forward-slash form.

    Backslashes are treated as separators, empty and "." segments are
    dropped. Absolute paths, drive letters and ".." segments are rejected.

    Args:
        relative_path: Path relative to some root.

    Returns:
        Normalized path ("" for the root itself).

    Raises:
        PathTraversalError: If the path is absolute or contains "..".
    """
    text = relative_path.replace("\\", "/")
    if text.startswith("/") or (len(text) > 1 and text[1] == ":"):
        raise PathTraversalError(f"Path must be relative: {relative_path!r}")

    parts = []
    for part in PurePosixPath(text).parts:
        if part in ("", "."):
            continue
        if part == "..":
            raise PathTraversalError(f"Path escapes its root: {relative_path!r}")
        parts.append(part)
    return "/".join(parts)


def safe_join(root: Path, relative_path: str) -> Path:
    """Join a relative path to root, guaranteeing the result stays inside.

    Args:
        root: Root directory.
        relative_path: Untrusted relative path.

    Returns:
        Absolute path under root.

    Raises:
        PathTraversalError: If the joined path resolves outside root.
    """
    normalized = normalize_relative(relative_path)
    base = root.resolve()
    target = (base / normalized).resolve() if normalized else base
    # Symlinks inside root could still point elsewhere
    if target != base and base not in target.parents:
        raise PathTraversalError(f"Path escapes its root: {relative_path!r}")
    return target


@dataclass
class PathResolver:
    """Resolves task relative paths against the configured roots."""

    config: WorkspaceConfig

    def local_path(self, relative_path: str, *parts: str) -> Path:
        """Absolute workspace path for relative_path (plus optional sub-parts)."""
        root = self.config.require_workspace()
        return safe_join(root, _join(relative_path, *parts))

    def remote_path(self, relative_path: str, *parts: str) -> Path:
        """Absolute remote source path for relative_path (plus optional sub-parts)."""
        root = self.config.require_remote()
        return safe_join(root, _join(relative_path, *parts))


def _join(*parts: str) -> str:
    return "/".join(p for p in parts if p)
