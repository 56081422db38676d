"""Command-line interface for assetsync.

This module provides the main CLI entry point and assembles all commands.

Commands:
- config show / config set: Manage settings
- link, unlink, sync, links: Workspace folders
- snapshot, snapshots, rollback, delete-snapshot: Snapshots
- task, create-asset: Remote task and asset records
"""

from __future__ import annotations

import logging

import click

from assetsync.client.cli.config import config_group
from assetsync.client.cli.snapshots import (
    create_asset,
    delete_snapshot,
    rollback,
    snapshot,
    snapshots,
    task,
)
from assetsync.client.cli.workspace import link, list_links, sync, unlink

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@click.group()
@click.version_option(package_name="assetsync")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """AssetSync - mirror remote task snapshots into a local workspace."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
    )


# Settings
cli.add_command(config_group)

# Workspace commands
cli.add_command(link)
cli.add_command(unlink)
cli.add_command(sync)
cli.add_command(list_links)

# Snapshot commands
cli.add_command(snapshot)
cli.add_command(snapshots)
cli.add_command(rollback)
cli.add_command(delete_snapshot)

# Remote records
cli.add_command(task)
cli.add_command(create_asset)

__all__ = ["cli"]
