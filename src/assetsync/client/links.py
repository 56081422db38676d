"""Registry of tasks linked into the workspace.

The mapping taskId -> relative workspace path is stored under the
"linkedTasks" settings key and always read and written as a whole.
Concurrent writers are not coordinated; the last write wins.
"""

from __future__ import annotations

import logging

from assetsync.client.settings import LINKED_TASKS_KEY, SettingsStore
from assetsync.core.paths import normalize_relative

logger = logging.getLogger(__name__)


class LinkRegistry:
    """Persists which workspace folder each task is linked to."""

    def __init__(self, store: SettingsStore) -> None:
        self._store = store

    def all(self) -> dict[str, str]:
        """Get every link as a taskId -> relative path mapping."""
        links = self._store.get(LINKED_TASKS_KEY) or {}
        if not isinstance(links, dict):
            logger.warning(f"Ignoring malformed {LINKED_TASKS_KEY} setting")
            return {}
        return {str(k): str(v) for k, v in links.items()}

    def get(self, task_id: str) -> str | None:
        """Get the relative path a task is linked to, if any."""
        return self.all().get(task_id)

    def set(self, task_id: str, relative_path: str) -> None:
        """Link a task to a relative path.

        Raises:
            PathTraversalError: If relative_path escapes the workspace.
        """
        links = self.all()
        links[task_id] = normalize_relative(relative_path)
        self._store.set(LINKED_TASKS_KEY, links)
        logger.debug(f"Linked {task_id} -> {links[task_id]}")

    def remove(self, task_id: str) -> None:
        """Remove a task's link. Missing links are ignored."""
        links = self.all()
        if links.pop(task_id, None) is not None:
            self._store.set(LINKED_TASKS_KEY, links)
            logger.debug(f"Unlinked {task_id}")
