"""Configuration utilities and commands for the assetsync CLI.

Commands:
- config show: Print the stored settings
- config set: Store one setting
"""

from __future__ import annotations

import contextlib
import json
import sys
from collections.abc import Iterator

import click

from assetsync.client.api import SnapshotClient
from assetsync.client.links import LinkRegistry
from assetsync.client.orchestrator import OperationResult, SyncOrchestrator
from assetsync.client.settings import (
    API_URL_KEY,
    LINKED_TASKS_KEY,
    REMOTE_PATH_KEY,
    USER_ID_KEY,
    USERNAME_KEY,
    WORKSPACE_PATH_KEY,
    SettingsStore,
)
from assetsync.core.errors import ConfigError

# CLI option name -> settings key
SETTING_NAMES = {
    "workspace": WORKSPACE_PATH_KEY,
    "remote": REMOTE_PATH_KEY,
    "api-url": API_URL_KEY,
    "username": USERNAME_KEY,
    "user-id": USER_ID_KEY,
}

# Exit code when the remote side changed but the local copy did not
EXIT_PARTIAL = 2


def echo_progress(label: str) -> None:
    click.echo(label)


def load_settings() -> SettingsStore:
    """Open the settings store, exiting if its file cannot be read."""
    store = SettingsStore()
    try:
        store.load()
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    return store


def confirm_prompt(question: str) -> bool:
    return click.confirm(question, default=False)


@contextlib.contextmanager
def open_orchestrator(
    assume_yes: bool = False, require_api: bool = True
) -> Iterator[SyncOrchestrator]:
    """Build an orchestrator from the stored settings.

    Args:
        assume_yes: Answer every confirmation with yes.
        require_api: Exit with an error if no API URL is configured.
    """
    store = load_settings()
    config = store.workspace_config()
    links = LinkRegistry(store)
    confirm = (lambda question: True) if assume_yes else confirm_prompt

    client = None
    if require_api:
        try:
            client = SnapshotClient(config)
        except ConfigError as e:
            click.echo(f"Error: {e}. Run 'assetsync config set api-url <url>'.", err=True)
            sys.exit(1)

    try:
        yield SyncOrchestrator(
            config, client, links, on_progress=echo_progress, confirm=confirm
        )
    finally:
        if client is not None:
            client.close()


def report(result: OperationResult, success_message: str) -> None:
    """Print an operation result and exit non-zero on failure."""
    if result.success:
        click.echo(success_message)
        return
    if result.cancelled:
        click.echo("Aborted.")
        return
    click.echo(f"Error: {result.error}", err=True)
    if result.partial:
        sys.exit(EXIT_PARTIAL)
    sys.exit(1)


@click.group("config")
def config_group() -> None:
    """Show or change settings."""


@config_group.command("show")
def config_show() -> None:
    """Print the stored settings."""
    store = load_settings()
    settings = store.load()
    click.echo(f"Config file: {store.path}")
    for name, key in SETTING_NAMES.items():
        click.echo(f"{name}: {settings.get(key) or '(not set)'}")
    links = settings.get(LINKED_TASKS_KEY) or {}
    click.echo(f"linked tasks: {len(links)}")


@config_group.command("set")
@click.argument("name", type=click.Choice(sorted(SETTING_NAMES)))
@click.argument("value")
def config_set(name: str, value: str) -> None:
    """Store one setting."""
    load_settings().set(SETTING_NAMES[name], value)
    click.echo(f"{name} = {value}")


def dump_json(data: object) -> None:
    click.echo(json.dumps(data, indent=2, default=str))
