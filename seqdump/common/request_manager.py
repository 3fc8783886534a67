"""Request manager for fetching one ID at a time.

This module provides SyncRequestManager, which encapsulates the HTTP client
and the ID-to-URL resolution logic.

The request manager is responsible for:
- Maintaining the HTTP client (httpx.Client) and its connection pool
- Building the request URL from the ID
- Accumulating the streamed body and returning a FetchResult

Each worker owns one manager for its whole lifetime so the connection setup
cost is paid once per worker, not once per ID.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from seqdump.common.exceptions import (
    RequestTimeoutException,
    SetupError,
    TransportError,
)
from seqdump.data_types import (
    DEFAULT_TIMEOUT,
    DEFAULT_URL_TEMPLATE,
    FetchResult,
)

logger = logging.getLogger(__name__)

# Read size for streamed bodies. The bytearray grows geometrically, so
# this bounds syscalls, not reallocations.
CHUNK_SIZE = 8192


def build_url(url_template: str, item_id: int) -> str:
    """Format an ID into the URL template.

    Args:
        url_template: Template with an ``{id}`` placeholder.
        item_id: The ID to substitute, rendered in decimal.

    Returns:
        The request URL.
    """
    return url_template.format(id=item_id)


def validate_url_template(url_template: str) -> None:
    """Check that a URL template can be formatted with an ID.

    Raises:
        SetupError: If the template lacks ``{id}`` or has other fields.
    """
    if "{id}" not in url_template:
        raise SetupError(
            f"URL template '{url_template}' must contain an {{id}} placeholder"
        )
    try:
        build_url(url_template, 0)
    except (KeyError, IndexError, ValueError) as e:
        raise SetupError(
            f"Invalid URL template '{url_template}': {e}"
        ) from e


class SyncRequestManager:
    """Manages HTTP requests for one worker.

    This class encapsulates:

    - httpx.Client lifecycle
    - ID to URL resolution
    - Response transformation into FetchResult

    Example::

        with SyncRequestManager(timeout=30.0) as manager:
            result = manager.fetch(16816356000000)
    """

    def __init__(
        self,
        url_template: str = DEFAULT_URL_TEMPLATE,
        timeout: float | None = DEFAULT_TIMEOUT,
        user_agent: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the request manager.

        Args:
            url_template: URL with an ``{id}`` placeholder.
            timeout: Request timeout in seconds. None means no timeout.
            user_agent: Optional User-Agent header sent with every request.
            transport: Optional httpx transport, for tests.
        """
        self.url_template = url_template
        self.timeout = timeout

        headers = {"User-Agent": user_agent} if user_agent else None
        self._client = httpx.Client(
            timeout=timeout,
            follow_redirects=True,
            headers=headers,
            transport=transport,
        )

    def close(self) -> None:
        """Close the HTTP client and release resources."""
        self._client.close()

    def __enter__(self) -> SyncRequestManager:
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit - closes the client."""
        self.close()

    def fetch(self, item_id: int) -> FetchResult:
        """Fetch one ID and return the final status and body.

        HTTP statuses of any kind are returned, not raised; interpreting
        them is the caller's job.

        Args:
            item_id: The ID to fetch.

        Returns:
            FetchResult with the post-redirect status code and full body.

        Raises:
            RequestTimeoutException: If the request times out.
            TransportError: If the request fails at the network level.
        """
        url = build_url(self.url_template, item_id)

        try:
            with self._client.stream("GET", url) as http_response:
                body = bytearray()
                for chunk in http_response.iter_bytes(CHUNK_SIZE):
                    body += chunk
                status_code = http_response.status_code
        except httpx.TimeoutException as e:
            raise RequestTimeoutException(
                url=url, item_id=item_id, timeout_seconds=self.timeout
            ) from e
        except httpx.RequestError as e:
            raise TransportError(
                url=url, item_id=item_id, reason=f"{type(e).__name__}: {e}"
            ) from e

        return FetchResult(
            item_id=item_id,
            status_code=status_code,
            content=bytes(body),
            url=url,
        )
