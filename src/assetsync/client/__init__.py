"""Client module - Remote API, settings, link registry and orchestration."""

from assetsync.client.api import Snapshot, SnapshotClient, latest_of_type
from assetsync.client.links import LinkRegistry
from assetsync.client.orchestrator import (
    OperationResult,
    OperationState,
    SnapshotMedia,
    SyncOrchestrator,
    SyncSummary,
)
from assetsync.client.settings import SettingsStore, get_config_dir

__all__ = [
    "LinkRegistry",
    "OperationResult",
    "OperationState",
    "SettingsStore",
    "Snapshot",
    "SnapshotClient",
    "SnapshotMedia",
    "SyncOrchestrator",
    "SyncSummary",
    "get_config_dir",
    "latest_of_type",
]
