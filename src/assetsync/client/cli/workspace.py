"""Workspace commands for the assetsync CLI.

Commands:
- link: Download a task's snapshots and link it to a workspace folder
- unlink: Delete a task's workspace folder and forget the link
- sync: Copy new and changed files from the remote tree
- links: List linked tasks
"""

from __future__ import annotations

import click

from assetsync.client.cli.config import load_settings, open_orchestrator, report
from assetsync.client.links import LinkRegistry


@click.command()
@click.argument("task_id")
@click.argument("relative_path")
def link(task_id: str, relative_path: str) -> None:
    """Link TASK_ID to RELATIVE_PATH under the workspace.

    The latest source and exports snapshots are extracted into
    RELATIVE_PATH/source and RELATIVE_PATH/exports.
    """
    with open_orchestrator() as orchestrator:
        result = orchestrator.link_to_workspace(task_id, relative_path)
    report(result, f"Linked {task_id} to {result.result}")


@click.command()
@click.argument("task_id")
@click.option(
    "--path", "relative_path", default=None, help="Folder to delete (defaults to the link)."
)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt.")
def unlink(task_id: str, relative_path: str | None, yes: bool) -> None:
    """Delete TASK_ID's workspace folder and remove its link."""
    with open_orchestrator(assume_yes=yes, require_api=False) as orchestrator:
        result = orchestrator.unlink_from_workspace(task_id, relative_path)
    report(result, f"Unlinked {task_id}")


@click.command()
@click.argument("relative_path", default="")
def sync(relative_path: str) -> None:
    """Copy new and changed files from the remote tree into the workspace."""
    with open_orchestrator(require_api=False) as orchestrator:
        result = orchestrator.sync_from_remote(relative_path)
    summary = result.result
    report(
        result,
        f"Synced {summary.files} files and {summary.directories} directories"
        if summary
        else "",
    )


@click.command("links")
def list_links() -> None:
    """List linked tasks."""
    links = LinkRegistry(load_settings()).all()
    if not links:
        click.echo("No linked tasks.")
        return
    for task_id, relative_path in sorted(links.items()):
        click.echo(f"{task_id}\t{relative_path}")
