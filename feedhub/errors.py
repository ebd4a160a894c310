"""Error types raised by feedhub."""

from typing import Optional


class FeedHubError(Exception):
    """Base class for feedhub errors."""

    pass


class InvalidPath(FeedHubError, PermissionError):
    """Raised when a script path resolves outside the scripts directory."""

    pass


class UnsupportedPlatform(FeedHubError):
    """Raised when a script's interpreter is not available on this OS."""

    pass


class ScriptExecutionFailed(FeedHubError):
    """Raised when a script cannot be launched or exits with a nonzero code."""

    def __init__(self, message: str, stderr: Optional[str] = None) -> None:
        self.stderr = stderr or ""
        if self.stderr:
            message = f"{message}, stderr: {self.stderr}"
        super().__init__(message)


class FeedParseFailed(FeedHubError):
    """Raised when a document is not a readable RSS/Atom feed."""

    pass


class NetworkFetchFailed(FeedHubError):
    """Raised on transport or HTTP-level errors while fetching a feed."""

    pass


class PersistenceFailed(FeedHubError):
    """Raised when the store cannot read or write."""

    pass


class FetchCancelled(FeedHubError):
    """Raised when a batch is cancelled while a fetch is in flight."""

    pass


class TranslationFailed(FeedHubError):
    """Raised when a translator cannot translate a text."""

    pass


class SyncFailed(FeedHubError):
    """Raised when a FreshRSS server rejects a request or cannot be reached."""

    pass
