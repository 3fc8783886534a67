"""Exception types for dump errors.

Setup errors abort a run before any work starts. Transport errors are
raised by the request manager for a single fetch and end the worker that
hit them; every other worker keeps going.
"""

from __future__ import annotations


class SeqdumpException(Exception):
    """Base class for all seqdump errors."""

    pass


class SetupError(SeqdumpException):
    """Raised when a run cannot be started.

    Covers output directory creation, worker thread creation, and invalid
    configuration such as a URL template without an ``{id}`` placeholder.
    """

    pass


class TransportError(SeqdumpException):
    """Raised when a fetch fails below the HTTP layer.

    DNS failures, refused connections, dropped connections and protocol
    errors end up here. A non-success HTTP status is not a transport error.

    Attributes:
        url: The URL that was being fetched.
        item_id: The ID that was being fetched.
        message: Human-readable error message.
    """

    def __init__(self, url: str, item_id: int, reason: str) -> None:
        """Initialize the exception.

        Args:
            url: The URL of the request.
            item_id: The ID being fetched.
            reason: Description of the underlying failure.
        """
        self.url = url
        self.item_id = item_id
        self.message = f"Failed to fetch ID {item_id} from {url}: {reason}"
        super().__init__(self.message)


class RequestTimeoutException(TransportError):
    """Raised when a request times out.

    Attributes:
        timeout_seconds: The timeout duration in seconds, if one was set.
    """

    def __init__(
        self, url: str, item_id: int, timeout_seconds: float | None
    ) -> None:
        """Initialize the exception.

        Args:
            url: The URL that timed out.
            item_id: The ID being fetched.
            timeout_seconds: The configured timeout in seconds.
        """
        self.timeout_seconds = timeout_seconds
        super().__init__(
            url, item_id, f"timed out after {timeout_seconds}s"
        )
