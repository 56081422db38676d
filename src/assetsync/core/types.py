"""Shared types for assetsync.

This module defines enums and records used by both the local
filesystem components and the remote client.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum


class SnapshotType(str, Enum):
    """Kind of content a snapshot captures.

    Also the name of the sub-directory holding that content inside a
    linked workspace folder.
    """

    SOURCE = "source"
    EXPORTS = "exports"


class EntryKind(str, Enum):
    """Filesystem entry kind in a diff."""

    FILE = "file"
    DIRECTORY = "directory"


class ChangeKind(str, Enum):
    """Why an entry appears in a diff."""

    MISSING = "missing"  # Present in source, absent in destination
    DISTINCT = "distinct"  # Present in both, content differs


@dataclass(frozen=True)
class SyncDiffEntry:
    """One difference between a source tree and a destination tree.

    Attributes:
        relative_path: Forward-slash path relative to both roots.
        entry_kind: File or directory.
        change_kind: Missing locally or content differs.
    """

    relative_path: str
    entry_kind: EntryKind
    change_kind: ChangeKind

    @property
    def name(self) -> str:
        """Last path component."""
        return self.relative_path.rsplit("/", 1)[-1]

    @property
    def is_dir(self) -> bool:
        return self.entry_kind is EntryKind.DIRECTORY


# Receives human readable progress labels, e.g. "syncing scene.blend"
ProgressCallback = Callable[[str], None]

# Asked a yes/no question before destructive steps
ConfirmCallback = Callable[[str], bool]
