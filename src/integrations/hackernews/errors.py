"""Errors raised by the Hacker News client.

Every failure reaching the upstream API is translated into one of these
types at the client boundary, with the original httpx or pydantic exception
attached as the cause.
"""

import time
from typing import Optional


class HackerNewsError(Exception):
    """Base exception for Hacker News API failures."""

    def __init__(
        self,
        message: str,
        endpoint: str,
        status_code: Optional[int] = None,
        **context,
    ):
        """Initialize error with request context.

        Args:
            message: Error message
            endpoint: Upstream path that was requested (e.g. "item/8863.json")
            status_code: HTTP status code if a response was received
            **context: Additional context information
        """
        super().__init__(message)
        self.endpoint = endpoint
        self.status_code = status_code
        self.context = context
        self.timestamp = time.time()

    def __str__(self):
        base = super().__str__()
        if self.status_code is not None:
            return f"[{self.endpoint} {self.status_code}] {base}"
        return f"[{self.endpoint}] {base}"


class TransportError(HackerNewsError):
    """Network failure, timeout or non-2xx response."""


class DecodeError(HackerNewsError):
    """Response body is not JSON or does not match the expected shape."""


class NotFoundError(HackerNewsError):
    """Upstream returned null where a value is required."""
