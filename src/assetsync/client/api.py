"""HTTP client for the remote task/snapshot API.

This module provides:
- Snapshot: Validated snapshot record
- SnapshotClient: List, fetch, create, delete and roll back snapshots

No call is retried here. Every failure surfaces as RemoteError carrying
the HTTP status and raw body, except the documented empty-result cases
(404 on contents, 404 on delete).
"""

from __future__ import annotations

import contextlib
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any
from urllib.parse import quote

import httpx

from assetsync.core.config import WorkspaceConfig
from assetsync.core.errors import InvalidPayloadError, RemoteError
from assetsync.core.types import SnapshotType

logger = logging.getLogger(__name__)

# Stream buffer for contents downloads
DOWNLOAD_CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True)
class Snapshot:
    """Snapshot record from the server.

    Snapshots are immutable; the client only fetches or references them.
    """

    commit_id: str
    type: SnapshotType
    message: str = ""
    username: str | None = None
    user_id: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_dict(cls, data: Any) -> Snapshot:
        """Create from API response dictionary.

        Raises:
            InvalidPayloadError: If required fields are missing or malformed.
        """
        if not isinstance(data, dict):
            raise InvalidPayloadError(f"Expected snapshot object, got {type(data).__name__}")
        commit_id = data.get("commitId")
        if not isinstance(commit_id, str) or not commit_id:
            raise InvalidPayloadError("Snapshot is missing commitId")
        try:
            snapshot_type = SnapshotType(data.get("type"))
        except ValueError as e:
            raise InvalidPayloadError(f"Unknown snapshot type: {data.get('type')!r}") from e

        created_at = None
        if data.get("createdAt"):
            try:
                created_at = datetime.fromisoformat(data["createdAt"])
            except (TypeError, ValueError) as e:
                raise InvalidPayloadError(
                    f"Invalid createdAt on snapshot {commit_id}: {data['createdAt']!r}"
                ) from e

        return cls(
            commit_id=commit_id,
            type=snapshot_type,
            message=data.get("message") or "",
            username=data.get("username"),
            user_id=data.get("userId"),
            created_at=created_at,
        )


def latest_of_type(snapshots: list[Snapshot], snapshot_type: SnapshotType) -> Snapshot | None:
    """Pick the most recent snapshot of a type.

    The server returns snapshots newest first, so the first match wins.
    """
    for snapshot in snapshots:
        if snapshot.type is snapshot_type:
            return snapshot
    return None


def _segment(value: str) -> str:
    return quote(value, safe="")


class SnapshotClient:
    """HTTP client for the snapshot API."""

    def __init__(
        self,
        config: WorkspaceConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Configuration holding the API URL and timeout.
            transport: Optional httpx transport (used by tests).

        Raises:
            ConfigError: If the API URL is not set.
        """
        self._base_url = config.require_api_url()
        self._client = httpx.Client(
            base_url=self._base_url,
            timeout=config.timeout,
            transport=transport,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> SnapshotClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request, mapping transport errors to RemoteError."""
        try:
            return self._client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            raise RemoteError(f"{method} {url} failed: {e}", None, str(e)) from e

    def _handle_response(self, response: httpx.Response) -> httpx.Response:
        """Raise RemoteError for any non-success status."""
        if response.is_success:
            return response
        raise RemoteError(
            f"{response.request.method} {response.request.url.path} "
            f"returned {response.status_code}",
            response.status_code,
            response.text,
        )

    def _json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise InvalidPayloadError(
                "Response is not valid JSON", response.status_code, response.text
            ) from e

    # === Snapshots ===

    def list_snapshots(self, task_id: str) -> list[Snapshot]:
        """List snapshots for a task in server order (newest first).

        Raises:
            RemoteError: On network failure or non-success status.
            InvalidPayloadError: If the response is not a list of snapshots.
        """
        response = self._handle_response(
            self._request("GET", f"/snapshots/{_segment(task_id)}")
        )
        data = self._json(response)
        if not isinstance(data, list):
            raise InvalidPayloadError(
                "Expected a list of snapshots", response.status_code, response.text
            )
        return [Snapshot.from_dict(item) for item in data]

    def fetch_contents(self, task_id: str, commit_id: str) -> bytes | None:
        """Fetch a snapshot's packaged contents.

        Returns:
            Zip bytes, or None when the snapshot has no packaged contents.
        """
        response = self._request("GET", self._contents_url(task_id, commit_id))
        if response.status_code == 404:
            return None
        return self._handle_response(response).content

    def download_contents(self, task_id: str, commit_id: str, dest: Path) -> bool:
        """Stream a snapshot's packaged contents to a file.

        Returns:
            True if written, False when the snapshot has no packaged contents.
            On False or on error nothing is left at dest.
        """
        url = self._contents_url(task_id, commit_id)
        try:
            with self._client.stream("GET", url) as response:
                if response.status_code == 404:
                    return False
                if not response.is_success:
                    response.read()
                    self._handle_response(response)
                with open(dest, "wb") as f:
                    for chunk in response.iter_bytes(DOWNLOAD_CHUNK_SIZE):
                        f.write(chunk)
        except httpx.RequestError as e:
            with contextlib.suppress(OSError):
                Path(dest).unlink(missing_ok=True)
            raise RemoteError(f"GET {url} failed: {e}", None, str(e)) from e
        return True

    def create_snapshot(
        self,
        task_id: str,
        snapshot_type: SnapshotType,
        message: str,
        username: str | None = None,
        user_id: str | None = None,
        thumbnail: Path | None = None,
        preview: Path | None = None,
        contents_zip: Path | None = None,
        bypass_zip: bool = False,
        bypass_processing: bool = False,
    ) -> Snapshot:
        """Create a snapshot record with optional attachments.

        Sent as multipart form data; thumbnail, preview and contents_zip
        are attached only when given.
        """
        data: dict[str, str] = {
            "taskId": task_id,
            "type": snapshot_type.value,
            "message": message,
        }
        if username:
            data["username"] = username
        if user_id:
            data["userId"] = user_id
        if bypass_zip:
            data["bypassZip"] = "true"
        if bypass_processing:
            data["bypassProcessing"] = "true"

        attachments = {
            "thumbnail": thumbnail,
            "preview": preview,
            "contentsZip": contents_zip,
        }
        with contextlib.ExitStack() as stack:
            files = {
                field: (path.name, stack.enter_context(open(path, "rb")))
                for field, path in attachments.items()
                if path is not None
            }
            logger.debug(
                f"Creating {snapshot_type.value} snapshot for {task_id} "
                f"with attachments {sorted(files)}"
            )
            response = self._handle_response(
                self._request("POST", "/snapshot", data=data, files=files or None)
            )
        return Snapshot.from_dict(self._json(response))

    def delete_snapshot(self, task_id: str, commit_id: str) -> None:
        """Delete a snapshot. Already-deleted snapshots count as success."""
        response = self._request(
            "DELETE", f"/snapshots/{_segment(task_id)}/{_segment(commit_id)}"
        )
        if response.status_code == 404:
            logger.info(f"Snapshot {commit_id} of {task_id} already deleted")
            return
        self._handle_response(response)

    def request_rollback(self, task_id: str, commit_id: str) -> Snapshot:
        """Move the task's remote pointer back to commit_id.

        Local files are not touched.
        """
        response = self._handle_response(
            self._request(
                "POST", f"/snapshots/{_segment(task_id)}/{_segment(commit_id)}/rollback"
            )
        )
        return Snapshot.from_dict(self._json(response))

    # === Tasks and assets ===

    def get_task(self, task_id: str) -> dict[str, Any]:
        """Get task details."""
        response = self._handle_response(
            self._request("GET", f"/get-task/{_segment(task_id)}")
        )
        data = self._json(response)
        if not isinstance(data, dict):
            raise InvalidPayloadError("Expected a task object", response.status_code, response.text)
        return data

    def create_asset(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Create an asset record."""
        response = self._handle_response(self._request("POST", "/createAsset", json=payload))
        data = self._json(response)
        if not isinstance(data, dict):
            raise InvalidPayloadError(
                "Expected an asset object", response.status_code, response.text
            )
        return data

    def _contents_url(self, task_id: str, commit_id: str) -> str:
        return f"/assets/{_segment(task_id)}/{_segment(commit_id)}/contents.zip"
