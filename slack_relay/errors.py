"""
Exceptions raised while relaying a Slack conversation to an AI provider.
"""
from typing import Optional


class RelayError(Exception):
    """Base class for all relay errors."""


class ThreadFetchError(RelayError):
    """Slack refused or failed a thread history lookup."""

    def __init__(self, error: str):
        self.error = error
        super().__init__(f"Failed to fetch messages in thread: {error}")


class ProviderError(RelayError):
    """
    A provider failure that is recovered into a fixed user-facing reply.

    Subclasses set ``kind`` to the ``ReplyMessages`` field holding their text.
    """
    kind = "request_failed"

    def __init__(self, message: str = "", status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message or self.__class__.__name__)


class EmptyReplyError(ProviderError):
    """The provider answered without any candidate text."""
    kind = "empty_reply"


class RateLimitedError(ProviderError):
    """The provider answered with HTTP 429."""
    kind = "rate_limited"


class RequestFailedError(ProviderError):
    """Any other non-200 status, transport failure or unreadable reply."""
    kind = "request_failed"
