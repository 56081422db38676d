"""Snapshot commands for the assetsync CLI.

Commands:
- snapshot: Capture and upload a new snapshot
- snapshots: List a task's snapshots
- rollback: Roll a task back to a snapshot
- delete-snapshot: Delete a snapshot
- task: Show task details
- create-asset: Create an asset record
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from assetsync.client.api import SnapshotClient
from assetsync.client.cli.config import dump_json, open_orchestrator, report
from assetsync.client.orchestrator import SnapshotMedia
from assetsync.client.settings import SettingsStore
from assetsync.core.errors import AssetSyncError, RemoteError
from assetsync.core.types import SnapshotType

SNAPSHOT_TYPES = [t.value for t in SnapshotType]


@click.command()
@click.argument("task_id")
@click.option(
    "--type",
    "snapshot_type",
    type=click.Choice(SNAPSHOT_TYPES),
    default=SnapshotType.SOURCE.value,
    show_default=True,
)
@click.option("--message", "-m", required=True, help="Snapshot message.")
@click.option("--thumbnail", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--preview", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--bypass-zip", is_flag=True, help="Do not pack the linked folder.")
@click.option("--bypass-processing", is_flag=True, help="Skip server-side media processing.")
def snapshot(
    task_id: str,
    snapshot_type: str,
    message: str,
    thumbnail: Path | None,
    preview: Path | None,
    bypass_zip: bool,
    bypass_processing: bool,
) -> None:
    """Capture TASK_ID's linked folder and upload it as a snapshot."""
    # User supplied files are never deleted
    media = SnapshotMedia(thumbnail=thumbnail, preview=preview, temporary=False)
    with open_orchestrator() as orchestrator:
        result = orchestrator.snapshot(
            task_id,
            SnapshotType(snapshot_type),
            message,
            media=media,
            bypass_zip=bypass_zip,
            bypass_processing=bypass_processing,
        )
    report(result, f"Created snapshot {result.result.commit_id}" if result.success else "")


@click.command()
@click.argument("task_id")
def snapshots(task_id: str) -> None:
    """List TASK_ID's snapshots, newest first."""
    with open_orchestrator() as orchestrator:
        result = orchestrator.list_snapshots(task_id)
    if not result.success:
        report(result, "")
        return
    if not result.result:
        click.echo("No snapshots.")
        return
    for item in result.result:
        created = item.created_at.isoformat() if item.created_at else "-"
        author = item.username or "-"
        click.echo(f"{item.commit_id}\t{item.type.value}\t{created}\t{author}\t{item.message}")


@click.command()
@click.argument("task_id")
@click.argument("commit_id")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt.")
def rollback(task_id: str, commit_id: str, yes: bool) -> None:
    """Roll TASK_ID back to COMMIT_ID and refresh the linked folder.

    Local changes in the snapshot's folder are discarded.
    """
    with open_orchestrator(assume_yes=yes) as orchestrator:
        result = orchestrator.rollback_snapshot(task_id, commit_id)
    if result.partial:
        click.echo("Warning: the remote task was rolled back.", err=True)
    report(result, f"Rolled back {task_id} to {commit_id}")


@click.command("delete-snapshot")
@click.argument("task_id")
@click.argument("commit_id")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt.")
def delete_snapshot(task_id: str, commit_id: str, yes: bool) -> None:
    """Delete snapshot COMMIT_ID of TASK_ID."""
    with open_orchestrator(assume_yes=yes) as orchestrator:
        result = orchestrator.delete_snapshot(task_id, commit_id)
    report(result, f"Deleted snapshot {commit_id}")


def _client_or_exit() -> SnapshotClient:
    try:
        return SnapshotClient(SettingsStore().workspace_config())
    except AssetSyncError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.command()
@click.argument("task_id")
def task(task_id: str) -> None:
    """Show TASK_ID's details as JSON."""
    with _client_or_exit() as client:
        try:
            dump_json(client.get_task(task_id))
        except RemoteError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)


@click.command("create-asset")
@click.argument("payload")
def create_asset(payload: str) -> None:
    """Create an asset from a JSON object PAYLOAD."""
    try:
        data = json.loads(payload)
    except ValueError as e:
        raise click.BadParameter(f"not valid JSON: {e}", param_hint="PAYLOAD") from e
    if not isinstance(data, dict):
        raise click.BadParameter("must be a JSON object", param_hint="PAYLOAD")

    with _client_or_exit() as client:
        try:
            dump_json(client.create_asset(data))
        except RemoteError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)
