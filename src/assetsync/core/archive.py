"""Zip packing and extraction of directory subtrees.

This module provides:
- pack_directory: Write every regular file under a directory to a zip
- unpack_archive: Extract a zip into a directory with traversal checks

Extraction is not atomic: on failure the destination may hold part of
the archive. Callers re-run or discard the destination.
"""

from __future__ import annotations

import io
import logging
import os
import shutil
import zipfile
import zlib
from collections.abc import Callable
from pathlib import Path
from typing import BinaryIO

from assetsync.core.errors import CorruptArchiveError, InvalidArchiveError, PathTraversalError
from assetsync.core.paths import normalize_relative, safe_join

logger = logging.getLogger(__name__)

COMPRESSION = zipfile.ZIP_DEFLATED
COMPRESS_LEVEL = 9

# Copy buffer for extracting members
CHUNK_SIZE = 1024 * 1024


def pack_directory(
    source_dir: Path,
    target: Path | BinaryIO,
    on_entry: Callable[[str], None] | None = None,
) -> int:
    """Pack a directory tree into a zip archive.

    Entries use forward-slash paths relative to source_dir. Symlinks and
    special files are skipped.

    Args:
        source_dir: Directory to pack.
        target: Output file path or writable binary stream.
        on_entry: Optional callback receiving each entry name.

    Returns:
        Number of files written.
    """
    source_dir = Path(source_dir)
    count = 0
    with zipfile.ZipFile(target, "w", COMPRESSION, compresslevel=COMPRESS_LEVEL) as zf:
        for dirpath, dirnames, filenames in os.walk(source_dir):
            dirnames.sort()
            for filename in sorted(filenames):
                path = Path(dirpath) / filename
                if path.is_symlink() or not path.is_file():
                    continue
                arcname = path.relative_to(source_dir).as_posix()
                zf.write(path, arcname)
                count += 1
                if on_entry:
                    on_entry(arcname)
    logger.debug(f"Packed {count} files from {source_dir}")
    return count


def unpack_archive(
    archive: Path | BinaryIO | bytes,
    dest_dir: Path,
    on_entry: Callable[[str], None] | None = None,
) -> int:
    """Extract a zip archive into dest_dir.

    dest_dir and intermediate directories are created as needed. It does
    not have to be empty: existing files at the same path are overwritten.
    Every entry is validated before anything is written.

    Args:
        archive: Zip file path, readable binary stream or raw bytes.
        dest_dir: Extraction root.
        on_entry: Optional callback receiving each entry name.

    Returns:
        Number of files extracted.

    Raises:
        InvalidArchiveError: If an entry would land outside dest_dir.
        CorruptArchiveError: If the archive cannot be read.
    """
    if isinstance(archive, bytes):
        archive = io.BytesIO(archive)

    dest_dir = Path(dest_dir)
    dest_dir.mkdir(parents=True, exist_ok=True)

    try:
        with zipfile.ZipFile(archive) as zf:
            members = _validated_members(zf, dest_dir)
            count = 0
            for info, target in members:
                if info.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                    continue
                if target.is_dir():
                    shutil.rmtree(target)
                target.parent.mkdir(parents=True, exist_ok=True)
                try:
                    with zf.open(info) as src, open(target, "wb") as dst:
                        shutil.copyfileobj(src, dst, CHUNK_SIZE)
                except (RuntimeError, NotImplementedError) as e:
                    # Encrypted member or unsupported compression method
                    raise CorruptArchiveError(f"Cannot extract {info.filename!r}: {e}") from e
                count += 1
                if on_entry:
                    on_entry(info.filename)
    except (zipfile.BadZipFile, zlib.error, EOFError) as e:
        raise CorruptArchiveError(f"Corrupt archive: {e}") from e

    logger.debug(f"Extracted {count} files into {dest_dir}")
    return count


def _validated_members(
    zf: zipfile.ZipFile, dest_dir: Path
) -> list[tuple[zipfile.ZipInfo, Path]]:
    members = []
    for info in zf.infolist():
        try:
            rel = normalize_relative(info.filename)
            if not rel:
                continue
            target = safe_join(dest_dir, rel)
        except PathTraversalError as e:
            raise InvalidArchiveError(
                f"Archive entry escapes destination: {info.filename!r}"
            ) from e
        members.append((info, target))
    return members
