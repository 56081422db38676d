"""Persistent key-value settings for assetsync.

Settings live in one JSON document (config.json) in the config
directory. Every write is a full read-modify-write of the document.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from assetsync.core.config import WorkspaceConfig
from assetsync.core.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.json"
CONFIG_DIR_ENV = "ASSETSYNC_HOME"

WORKSPACE_PATH_KEY = "workspacePath"
REMOTE_PATH_KEY = "remotePath"
API_URL_KEY = "apiUrl"
USERNAME_KEY = "username"
USER_ID_KEY = "userId"
LINKED_TASKS_KEY = "linkedTasks"


def get_config_dir() -> Path:
    """Get the configuration directory.

    Returns:
        $ASSETSYNC_HOME if set, otherwise ~/.assetsync.
    """
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".assetsync"


class SettingsStore:
    """JSON file backed settings store."""

    def __init__(self, config_file: Path | None = None) -> None:
        """Initialize the store.

        Args:
            config_file: Settings file. Defaults to config.json in get_config_dir().
        """
        self._config_file = config_file or get_config_dir() / CONFIG_FILE_NAME

    @property
    def path(self) -> Path:
        return self._config_file

    def load(self) -> dict[str, Any]:
        """Load all settings.

        Raises:
            ConfigError: If the settings file is not valid JSON.
        """
        if not self._config_file.exists():
            return {}
        try:
            data = json.loads(self._config_file.read_text(encoding="utf-8"))
        except ValueError as e:
            raise ConfigError(f"Settings file {self._config_file} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed settings file {self._config_file}")
            return {}
        return data

    def save(self, settings: dict[str, Any]) -> None:
        """Replace all settings."""
        self._config_file.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._config_file.with_suffix(".tmp")
        tmp_path.write_text(json.dumps(settings, indent=2), encoding="utf-8")
        tmp_path.replace(self._config_file)

    def get(self, key: str, default: Any = None) -> Any:
        return self.load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        settings = self.load()
        settings[key] = value
        self.save(settings)

    def delete(self, key: str) -> None:
        settings = self.load()
        if key in settings:
            del settings[key]
            self.save(settings)

    def workspace_config(self) -> WorkspaceConfig:
        """Build a WorkspaceConfig from the stored settings."""
        return WorkspaceConfig.from_settings(self.load())
