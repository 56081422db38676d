"""Directory tree comparison.

This module provides:
- diff_trees: One-directional comparison of a source tree against a
  destination tree, source authoritative
- apply_entry: Materialize one diff entry in the destination

Entries present only in the destination are never reported. Excluded
entries are skipped together with everything below them.
"""

from __future__ import annotations

import filecmp
import logging
import os
import shutil
from collections.abc import Iterator
from pathlib import Path

from assetsync.core.errors import NotFoundError
from assetsync.core.ignore import IgnorePatterns
from assetsync.core.types import ChangeKind, EntryKind, SyncDiffEntry

logger = logging.getLogger(__name__)


def diff_trees(
    source_dir: Path,
    dest_dir: Path,
    compare_content: bool = True,
    exclude: IgnorePatterns | None = None,
) -> list[SyncDiffEntry]:
    """Compare source_dir against dest_dir.

    Ordering is depth-first with a directory reported before anything it
    contains, so entries can be applied in sequence.

    Args:
        source_dir: Authoritative tree.
        dest_dir: Tree to bring up to date (may not exist yet).
        compare_content: Compare file bytes. When False only size and
            modification time are compared.
        exclude: Patterns to skip. Defaults to IgnorePatterns().

    Returns:
        Ordered list of differences.

    Raises:
        NotFoundError: If source_dir does not exist.
    """
    source_dir = Path(source_dir)
    dest_dir = Path(dest_dir)
    if not source_dir.is_dir():
        raise NotFoundError(f"Source directory not found: {source_dir}")
    if exclude is None:
        exclude = IgnorePatterns()

    entries = list(_walk(source_dir, dest_dir, "", compare_content, exclude))
    logger.debug(f"Diff {source_dir} -> {dest_dir}: {len(entries)} entries")
    return entries


def _walk(
    source: Path,
    dest: Path,
    prefix: str,
    compare_content: bool,
    exclude: IgnorePatterns,
) -> Iterator[SyncDiffEntry]:
    with os.scandir(source) as it:
        children = sorted(it, key=lambda e: e.name)

    for child in children:
        if child.is_symlink():
            continue
        rel = f"{prefix}{child.name}"
        is_dir = child.is_dir()
        if exclude.matches(rel, is_dir):
            continue

        dest_child = dest / child.name
        if is_dir:
            if not dest_child.exists():
                yield SyncDiffEntry(rel, EntryKind.DIRECTORY, ChangeKind.MISSING)
            elif not dest_child.is_dir():
                yield SyncDiffEntry(rel, EntryKind.DIRECTORY, ChangeKind.DISTINCT)
            yield from _walk(Path(child.path), dest_child, rel + "/", compare_content, exclude)
        elif child.is_file():
            if not dest_child.exists():
                yield SyncDiffEntry(rel, EntryKind.FILE, ChangeKind.MISSING)
            elif not dest_child.is_file() or not _same_file(
                Path(child.path), dest_child, compare_content
            ):
                yield SyncDiffEntry(rel, EntryKind.FILE, ChangeKind.DISTINCT)


def _same_file(a: Path, b: Path, compare_content: bool) -> bool:
    if compare_content:
        return filecmp.cmp(a, b, shallow=False)
    sa, sb = a.stat(), b.stat()
    return sa.st_size == sb.st_size and int(sa.st_mtime) == int(sb.st_mtime)


def apply_entry(entry: SyncDiffEntry, source_dir: Path, dest_dir: Path) -> None:
    """Create the directory or copy the file an entry describes.

    Files are copied whole, overwriting whatever is at the destination.
    A destination of the wrong kind is removed first.
    """
    src = source_dir / entry.relative_path
    dst = dest_dir / entry.relative_path

    if entry.is_dir:
        if dst.exists() and not dst.is_dir():
            dst.unlink()
        dst.mkdir(parents=True, exist_ok=True)
        return

    if dst.is_dir():
        shutil.rmtree(dst)
    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(src, dst)
