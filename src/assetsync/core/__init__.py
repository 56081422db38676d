"""Core module - Paths, tree comparison, archives and shared types."""

from assetsync.core.archive import pack_directory, unpack_archive
from assetsync.core.config import WorkspaceConfig
from assetsync.core.errors import (
    AssetSyncError,
    CancelledException,
    ConfigError,
    CorruptArchiveError,
    InvalidArchiveError,
    InvalidPayloadError,
    NotFoundError,
    PartialFailureError,
    PathTraversalError,
    RemoteError,
)
from assetsync.core.ignore import DEFAULT_IGNORE_PATTERNS, IgnorePatterns
from assetsync.core.paths import PathResolver, normalize_relative, safe_join
from assetsync.core.treediff import apply_entry, diff_trees
from assetsync.core.types import (
    ChangeKind,
    ConfirmCallback,
    EntryKind,
    ProgressCallback,
    SnapshotType,
    SyncDiffEntry,
)

__all__ = [
    # Archive
    "pack_directory",
    "unpack_archive",
    # Config
    "WorkspaceConfig",
    # Errors
    "AssetSyncError",
    "CancelledException",
    "ConfigError",
    "CorruptArchiveError",
    "InvalidArchiveError",
    "InvalidPayloadError",
    "NotFoundError",
    "PartialFailureError",
    "PathTraversalError",
    "RemoteError",
    # Ignore
    "DEFAULT_IGNORE_PATTERNS",
    "IgnorePatterns",
    # Paths
    "PathResolver",
    "normalize_relative",
    "safe_join",
    # Tree diff
    "apply_entry",
    "diff_trees",
    # Types
    "ChangeKind",
    "ConfirmCallback",
    "EntryKind",
    "ProgressCallback",
    "SnapshotType",
    "SyncDiffEntry",
]
