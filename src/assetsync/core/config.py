"""Configuration classes for assetsync.

This module defines the roots and remote endpoint an operation runs
against. Values come from the settings store and are treated as
invariant for the duration of one operation.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from assetsync.core.errors import ConfigError


@dataclass
class WorkspaceConfig:
    """Configuration for workspace and remote access.

    Attributes:
        workspace_path: Local root mirroring remote task content.
        remote_path: Root of the shared remote source tree.
        api_url: Base URL of the snapshot API (e.g. "https://assets.example.com").
        timeout: Request timeout in seconds.
        username: Author name attached to new snapshots.
        user_id: Author identifier attached to new snapshots.
    """

    workspace_path: str | None = None
    remote_path: str | None = None
    api_url: str | None = None
    timeout: float = 30.0
    username: str | None = None
    user_id: str | None = None

    def __post_init__(self) -> None:
        """Normalize API URL."""
        if self.api_url:
            self.api_url = self.api_url.rstrip("/")

    @classmethod
    def from_settings(cls, settings: dict[str, Any]) -> WorkspaceConfig:
        """Create from a settings mapping (camelCase keys)."""
        return cls(
            workspace_path=settings.get("workspacePath") or None,
            remote_path=settings.get("remotePath") or None,
            api_url=settings.get("apiUrl") or None,
            timeout=float(settings.get("timeout", 30.0)),
            username=settings.get("username") or None,
            user_id=settings.get("userId") or None,
        )

    def require_workspace(self) -> Path:
        """Get the workspace root.

        Raises:
            ConfigError: If the workspace path is not set.
        """
        if not self.workspace_path:
            raise ConfigError("Workspace path is not set")
        return Path(self.workspace_path).expanduser()

    def require_remote(self) -> Path:
        """Get the remote source root.

        Raises:
            ConfigError: If the remote path is not set.
        """
        if not self.remote_path:
            raise ConfigError("Remote path is not set")
        return Path(self.remote_path).expanduser()

    def require_api_url(self) -> str:
        """Get the API base URL.

        Raises:
            ConfigError: If the API URL is not set.
        """
        if not self.api_url:
            raise ConfigError("API URL is not set")
        return self.api_url
