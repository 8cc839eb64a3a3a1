"""Exception hierarchy shared by the sync jobs."""
from __future__ import annotations


class SyncError(Exception):
    """Base exception for synchronization failures."""
    pass


class InvalidSyncTask(SyncError):
    """A queued sync task is missing required configuration. Fatal for that task."""
    pass


class ProviderError(SyncError):
    """An external provider rejected a request."""

    def __init__(self, provider: str, status_code: int | None, message: str = ""):
        self.provider = provider
        self.status_code = status_code
        super().__init__(f"{provider} request failed ({status_code}): {message}")


class ProviderRateLimitError(ProviderError):
    """Rate limit or transient upstream failure; safe to retry."""
    pass
