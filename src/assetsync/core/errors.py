"""Exception hierarchy for assetsync.

This module provides:
- AssetSyncError: Base exception
- ConfigError: A required setting is missing
- NotFoundError: Source path or snapshot missing
- PathTraversalError: A relative path escapes its root
- InvalidArchiveError, CorruptArchiveError: Archive failures
- RemoteError, InvalidPayloadError: Remote API failures
- PartialFailureError: Remote mutation succeeded, local step failed
- CancelledException: User declined a confirmation
"""

from __future__ import annotations


class AssetSyncError(Exception):
    """Base exception for assetsync errors."""


class ConfigError(AssetSyncError):
    """A required configuration value is not set."""


class NotFoundError(AssetSyncError):
    """Source directory or snapshot does not exist."""


class PathTraversalError(AssetSyncError):
    """A relative path resolves outside of its root directory."""


class InvalidArchiveError(AssetSyncError):
    """Archive entry would be written outside the destination."""


class CorruptArchiveError(AssetSyncError):
    """Archive stream could not be read."""


class RemoteError(AssetSyncError):
    """Remote API call failed.

    Attributes:
        status_code: HTTP status, or None for network failures.
        body: Raw response body (or the transport error text).
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str = "",
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class InvalidPayloadError(RemoteError):
    """Remote response did not match the expected record shape."""


class PartialFailureError(AssetSyncError):
    """Remote state changed but the local mirror could not be updated.

    Attributes:
        result: What the remote mutation returned.
    """

    def __init__(self, message: str, result: object = None) -> None:
        super().__init__(message)
        self.result = result


class CancelledException(AssetSyncError):
    """User declined a confirmation. A normal negative outcome."""
