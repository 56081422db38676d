"""Tests for core configuration classes."""

from __future__ import annotations

from pathlib import Path

import pytest

from assetsync.core.config import WorkspaceConfig
from assetsync.core.errors import ConfigError


class TestWorkspaceConfig:
    """Tests for WorkspaceConfig class."""

    def test_defaults(self) -> None:
        """Should start with nothing configured."""
        config = WorkspaceConfig()
        assert config.workspace_path is None
        assert config.remote_path is None
        assert config.api_url is None
        assert config.timeout == 30.0

    def test_url_trailing_slash_removed(self) -> None:
        """Should strip trailing slash from the API URL."""
        config = WorkspaceConfig(api_url="https://assets.example.com/")
        assert config.api_url == "https://assets.example.com"

    def test_from_settings(self) -> None:
        """Should read camelCase settings keys."""
        config = WorkspaceConfig.from_settings(
            {
                "workspacePath": "/w",
                "remotePath": "/r",
                "apiUrl": "http://test/",
                "username": "alice",
                "userId": "u1",
                "linkedTasks": {"T1": "proj/T1"},
            }
        )
        assert config.workspace_path == "/w"
        assert config.remote_path == "/r"
        assert config.api_url == "http://test"
        assert config.username == "alice"
        assert config.user_id == "u1"

    def test_from_settings_empty_strings_are_unset(self) -> None:
        """Should treat empty strings as not configured."""
        config = WorkspaceConfig.from_settings({"workspacePath": "", "remotePath": ""})
        assert config.workspace_path is None
        assert config.remote_path is None

    def test_require_workspace(self) -> None:
        """Should return the workspace root as a Path."""
        assert WorkspaceConfig(workspace_path="/w").require_workspace() == Path("/w")

    @pytest.mark.parametrize("method", ["require_workspace", "require_remote", "require_api_url"])
    def test_require_unset_raises(self, method: str) -> None:
        """Should raise ConfigError for unset values."""
        with pytest.raises(ConfigError):
            getattr(WorkspaceConfig(), method)()
