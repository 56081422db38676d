"""Workspace synchronization and snapshot orchestration.

This module provides:
- OperationState: Lifecycle of one orchestrated operation
- OperationResult: Classified outcome handed back to the caller
- SnapshotMedia, SyncSummary: Operation inputs/outputs
- SyncOrchestrator: Link, unlink, sync, snapshot and rollback

Each public operation runs Start -> Validate -> Transfer -> Finalize and
ends Done or Failed. Operations never raise past their own boundary;
errors are caught, classified and returned as an OperationResult.

Operations on the same task are not serialized. Callers must not start
a second operation on a task while one is pending (e.g. disable the UI
action), or e.g. a snapshot and an unlink may interleave.
"""

from __future__ import annotations

import contextlib
import logging
import shutil
import tempfile
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

from assetsync.client.api import Snapshot, latest_of_type
from assetsync.core.archive import pack_directory, unpack_archive
from assetsync.core.errors import (
    AssetSyncError,
    CancelledException,
    ConfigError,
    PartialFailureError,
    PathTraversalError,
    RemoteError,
)
from assetsync.core.ignore import IgnorePatterns
from assetsync.core.paths import PathResolver, normalize_relative
from assetsync.core.treediff import apply_entry, diff_trees
from assetsync.core.types import ConfirmCallback, ProgressCallback, SnapshotType

if TYPE_CHECKING:
    from assetsync.client.api import SnapshotClient
    from assetsync.client.links import LinkRegistry
    from assetsync.core.config import WorkspaceConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

TEMP_PREFIX = "assetsync-"


class OperationState(Enum):
    """State of an orchestrated operation."""

    START = auto()
    VALIDATE = auto()
    TRANSFER = auto()
    FINALIZE = auto()
    DONE = auto()
    FAILED = auto()


@dataclass
class OperationResult:
    """Outcome of an orchestrated operation.

    Attributes:
        success: Whether the operation completed.
        result: Operation specific value (Snapshot, SyncSummary, ...).
        error: Error message if failed.
        cancelled: The user declined a confirmation.
        partial: The remote side changed but the local step failed.
        status_code: HTTP status when the failure came from the remote API.
        failed_in: State the operation was in when it failed.
    """

    success: bool
    result: Any = None
    error: str | None = None
    cancelled: bool = False
    partial: bool = False
    status_code: int | None = None
    failed_in: OperationState | None = None


@dataclass
class SyncSummary:
    """Counts from a sync-from-remote run."""

    directories: int = 0
    files: int = 0


@dataclass
class SnapshotMedia:
    """Media attachments for a new snapshot.

    Attributes:
        thumbnail: Thumbnail image file.
        preview: Preview video/image file.
        temporary: Files were produced for this snapshot only and are
            deleted once the submission finishes.
    """

    thumbnail: Path | None = None
    preview: Path | None = None
    temporary: bool = True

    def files(self) -> list[Path]:
        return [p for p in (self.thumbnail, self.preview) if p is not None]


@dataclass
class _Operation:
    name: str
    task_id: str | None = None
    state: OperationState = OperationState.START

    def enter(self, state: OperationState) -> None:
        self.state = state
        logger.debug(f"{self.name}[{self.task_id or '-'}]: {state.name}")

    def fail(self) -> OperationState:
        """Move to FAILED and return the state the failure happened in."""
        failed_in = self.state
        self.enter(OperationState.FAILED)
        return failed_in


def _decline(question: str) -> bool:
    return False


class SyncOrchestrator:
    """Coordinates local workspace folders with remote task snapshots."""

    def __init__(
        self,
        config: WorkspaceConfig,
        client: SnapshotClient | None,
        links: LinkRegistry,
        on_progress: ProgressCallback | None = None,
        confirm: ConfirmCallback | None = None,
        exclude: IgnorePatterns | None = None,
        temp_dir: Path | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            config: Workspace and remote roots.
            client: Snapshot API client. May be None when only
                sync_from_remote is used.
            links: Task link registry.
            on_progress: Receives progress labels for display.
            confirm: Asked before destructive steps. Without one, every
                confirmation is declined.
            exclude: Patterns skipped by sync-from-remote.
            temp_dir: Where temporary archives are created.
        """
        self._config = config
        self._client = client
        self._links = links
        self._resolver = PathResolver(config)
        self._on_progress = on_progress
        self._confirm = confirm or _decline
        self._exclude = exclude or IgnorePatterns()
        self._temp_dir = temp_dir

    @property
    def client(self) -> SnapshotClient:
        if self._client is None:
            raise ConfigError("API URL is not set")
        return self._client

    def _progress(self, label: str) -> None:
        if self._on_progress:
            self._on_progress(label)

    def _require_confirmation(self, question: str) -> None:
        if not self._confirm(question):
            raise CancelledException(question)

    def _run(self, op: _Operation, work: Callable[[_Operation], T]) -> OperationResult:
        """Run work, classifying every failure into an OperationResult."""
        try:
            value = work(op)
        except CancelledException:
            logger.info(f"{op.name}[{op.task_id or '-'}]: cancelled by user")
            return OperationResult(success=False, cancelled=True, failed_in=op.fail())
        except PartialFailureError as e:
            logger.error(f"{op.name}[{op.task_id or '-'}]: partial failure: {e}")
            return OperationResult(
                success=False,
                result=e.result,
                error=str(e),
                partial=True,
                failed_in=op.fail(),
            )
        except RemoteError as e:
            logger.error(
                f"{op.name}[{op.task_id or '-'}]: remote error "
                f"(status {e.status_code}) in {op.state.name}: {e}"
            )
            return OperationResult(
                success=False, error=str(e), status_code=e.status_code, failed_in=op.fail()
            )
        except (AssetSyncError, OSError) as e:
            logger.error(f"{op.name}[{op.task_id or '-'}]: failed in {op.state.name}: {e}")
            return OperationResult(success=False, error=str(e), failed_in=op.fail())

        op.enter(OperationState.DONE)
        return OperationResult(success=True, result=value)

    def _temporary_directory(self) -> tempfile.TemporaryDirectory[str]:
        return tempfile.TemporaryDirectory(prefix=TEMP_PREFIX, dir=self._temp_dir)

    def _materialize(
        self,
        task_id: str,
        commit_id: str,
        snapshot_type: SnapshotType,
        dest: Path,
        tmp_dir: Path,
    ) -> bool:
        """Download a snapshot's contents and extract them into dest.

        Returns:
            False if the snapshot has no packaged contents.
        """
        self._progress(f"Downloading {snapshot_type.value} zip...")
        zip_path = tmp_dir / f"{snapshot_type.value}.zip"
        try:
            if not self.client.download_contents(task_id, commit_id, zip_path):
                logger.warning(
                    f"No {snapshot_type.value} contents for {task_id}@{commit_id}, skipping"
                )
                return False
            self._progress(f"Extracting {snapshot_type.value}...")
            count = unpack_archive(zip_path, dest)
        finally:
            zip_path.unlink(missing_ok=True)
        logger.info(f"Extracted {count} {snapshot_type.value} files into {dest}")
        return True

    @staticmethod
    def _folder(relative_path: str) -> str:
        rel = normalize_relative(relative_path)
        if not rel:
            raise PathTraversalError("Link path must name a folder inside the workspace")
        return rel

    # === Sync ===

    def sync_from_remote(self, relative_path: str, task_id: str | None = None) -> OperationResult:
        """Copy new and changed entries from the remote tree into the workspace.

        Nothing in the workspace is deleted and the link registry is not
        touched.
        """
        op = _Operation("sync", task_id)

        def work(op: _Operation) -> SyncSummary:
            op.enter(OperationState.VALIDATE)
            source = self._resolver.remote_path(relative_path)
            dest = self._resolver.local_path(relative_path)

            op.enter(OperationState.TRANSFER)
            entries = diff_trees(source, dest, compare_content=True, exclude=self._exclude)
            dest.mkdir(parents=True, exist_ok=True)
            summary = SyncSummary()
            for entry in entries:
                self._progress(f"syncing {entry.name}")
                apply_entry(entry, source, dest)
                if entry.is_dir:
                    summary.directories += 1
                else:
                    summary.files += 1

            op.enter(OperationState.FINALIZE)
            logger.info(
                f"Synced {relative_path}: {summary.files} files, "
                f"{summary.directories} directories"
            )
            return summary

        return self._run(op, work)

    # === Link / unlink ===

    def link_to_workspace(self, task_id: str, relative_path: str) -> OperationResult:
        """Materialize a task's latest snapshots and link it to relative_path.

        The most recent "source" and "exports" snapshots are each extracted
        into relative_path/<type>/. A snapshot without packaged contents is
        skipped. The link is registered only once every selected snapshot
        was extracted; on failure extracted files are left on disk.
        """
        op = _Operation("link", task_id)

        def work(op: _Operation) -> str:
            op.enter(OperationState.VALIDATE)
            rel = self._folder(relative_path)
            target = self._resolver.local_path(rel)

            op.enter(OperationState.TRANSFER)
            snapshots = self.client.list_snapshots(task_id)
            target.mkdir(parents=True, exist_ok=True)
            if not snapshots:
                logger.info(f"Task {task_id} has no snapshots yet")
            else:
                with self._temporary_directory() as tmp:
                    for snapshot_type in SnapshotType:
                        snapshot = latest_of_type(snapshots, snapshot_type)
                        if snapshot is None:
                            continue
                        self._materialize(
                            task_id,
                            snapshot.commit_id,
                            snapshot_type,
                            target / snapshot_type.value,
                            Path(tmp),
                        )

            op.enter(OperationState.FINALIZE)
            self._links.set(task_id, rel)
            logger.info(f"Linked {task_id} to {target}")
            return rel

        return self._run(op, work)

    def unlink_from_workspace(
        self, task_id: str, relative_path: str | None = None
    ) -> OperationResult:
        """Delete a task's workspace folder and forget its link.

        The folder is deleted only after confirmation. The link is removed
        even when no folder exists on disk.
        """
        op = _Operation("unlink", task_id)

        def work(op: _Operation) -> None:
            op.enter(OperationState.VALIDATE)
            rel = relative_path if relative_path is not None else self._links.get(task_id)
            target = self._resolver.local_path(self._folder(rel)) if rel else None
            if target is not None and target.exists():
                self._require_confirmation(f"Delete {target} and unlink {task_id}?")

            op.enter(OperationState.TRANSFER)
            if target is not None and target.exists():
                shutil.rmtree(target)
                logger.info(f"Deleted {target}")

            op.enter(OperationState.FINALIZE)
            self._links.remove(task_id)

        return self._run(op, work)

    # === Snapshots ===

    def snapshot(
        self,
        task_id: str,
        snapshot_type: SnapshotType,
        message: str,
        media: SnapshotMedia | None = None,
        bypass_zip: bool = False,
        bypass_processing: bool = False,
    ) -> OperationResult:
        """Capture the linked folder and submit it as a new snapshot.

        Unless bypass_zip is set, workspace/<link>/<type> is packed when
        the task is linked and that folder exists. The temporary archive and
        temporary media are deleted on every exit path.
        """
        op = _Operation("snapshot", task_id)

        def work(op: _Operation) -> Snapshot:
            op.enter(OperationState.VALIDATE)
            source_dir = None
            if not bypass_zip:
                rel = self._links.get(task_id)
                if rel:
                    candidate = self._resolver.local_path(rel, snapshot_type.value)
                    if candidate.is_dir():
                        source_dir = candidate

            op.enter(OperationState.TRANSFER)
            with self._temporary_directory() as tmp:
                contents_zip = None
                if source_dir is not None:
                    self._progress(f"Packing {snapshot_type.value}...")
                    contents_zip = Path(tmp) / "contents.zip"
                    count = pack_directory(source_dir, contents_zip)
                    logger.info(f"Packed {count} files from {source_dir}")

                self._progress("Uploading snapshot...")
                created = self.client.create_snapshot(
                    task_id,
                    snapshot_type,
                    message,
                    username=self._config.username,
                    user_id=self._config.user_id,
                    thumbnail=media.thumbnail if media else None,
                    preview=media.preview if media else None,
                    contents_zip=contents_zip,
                    bypass_zip=bypass_zip,
                    bypass_processing=bypass_processing,
                )

            op.enter(OperationState.FINALIZE)
            logger.info(f"Created {snapshot_type.value} snapshot {created.commit_id} for {task_id}")
            return created

        try:
            return self._run(op, work)
        finally:
            if media is not None and media.temporary:
                for path in media.files():
                    with contextlib.suppress(OSError):
                        path.unlink(missing_ok=True)

    def list_snapshots(self, task_id: str) -> OperationResult:
        """List a task's snapshots (newest first)."""
        op = _Operation("list", task_id)

        def work(op: _Operation) -> list[Snapshot]:
            op.enter(OperationState.TRANSFER)
            return self.client.list_snapshots(task_id)

        return self._run(op, work)

    def delete_snapshot(self, task_id: str, commit_id: str) -> OperationResult:
        """Delete a remote snapshot after confirmation."""
        op = _Operation("delete", task_id)

        def work(op: _Operation) -> None:
            op.enter(OperationState.VALIDATE)
            self._require_confirmation(f"Delete snapshot {commit_id} of {task_id}?")
            op.enter(OperationState.TRANSFER)
            self.client.delete_snapshot(task_id, commit_id)
            logger.info(f"Deleted snapshot {commit_id} of {task_id}")

        return self._run(op, work)

    def rollback_snapshot(self, task_id: str, commit_id: str) -> OperationResult:
        """Roll a task back to commit_id remotely, then locally.

        After confirmation the server pointer is moved first. If the task is
        linked, workspace/<link>/<type> is then replaced by the snapshot's
        contents. A failure after the remote rollback is reported as a
        partial failure: the remote record changed, the local copy may be
        stale.
        """
        op = _Operation("rollback", task_id)

        def work(op: _Operation) -> Snapshot:
            op.enter(OperationState.VALIDATE)
            self._require_confirmation(
                f"Roll {task_id} back to {commit_id}? Local changes will be lost."
            )
            rel = self._links.get(task_id)
            linked_root = self._resolver.local_path(rel) if rel else None

            op.enter(OperationState.TRANSFER)
            snapshot_type = self._lookup_type(task_id, commit_id)
            remote = self.client.request_rollback(task_id, commit_id)
            logger.info(f"Remote rollback of {task_id} to {commit_id} succeeded")
            if linked_root is None:
                return remote

            dest = linked_root / snapshot_type.value
            try:
                if dest.exists():
                    shutil.rmtree(dest)
                dest.mkdir(parents=True, exist_ok=True)
                with self._temporary_directory() as tmp:
                    self._materialize(task_id, commit_id, snapshot_type, dest, Path(tmp))
            except (AssetSyncError, OSError) as e:
                raise PartialFailureError(
                    f"Rolled back {task_id} to {commit_id} remotely, but updating "
                    f"{dest} failed: {e}. The local copy may be stale.",
                    result=remote,
                ) from e

            op.enter(OperationState.FINALIZE)
            return remote

        return self._run(op, work)

    def _lookup_type(self, task_id: str, commit_id: str) -> SnapshotType:
        """Find a snapshot's type, falling back to source."""
        try:
            for snapshot in self.client.list_snapshots(task_id):
                if snapshot.commit_id == commit_id:
                    return snapshot.type
            logger.warning(f"Snapshot {commit_id} not listed for {task_id}, assuming source")
        except RemoteError as e:
            logger.warning(f"Could not look up type of {commit_id}, assuming source: {e}")
        return SnapshotType.SOURCE
