"""Hacker News Firebase API client.

One method per upstream endpoint. Each call issues exactly one GET, decodes
the JSON body and returns a typed value. There is no retry and no caching;
a single ``httpx.AsyncClient`` connection pool is shared by every call.

Example:
    >>> async with HackerNewsClient() as client:
    ...     ids = await client.fetch_list(StoryListing.TOP)
    ...     story = await client.fetch_item(ids[0])
"""

import asyncio
from enum import Enum
from typing import Any, Optional
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter, ValidationError

from src.integrations.hackernews.errors import DecodeError, NotFoundError, TransportError
from src.integrations.hackernews.models import (
    ID_LIST_ADAPTER,
    ITEM_ADAPTER,
    USER_ADAPTER,
    Item,
    Updates,
    User,
)
from src.utils.config import get_settings
from src.utils.logging_config import get_logger


def _get_logger():
    """Get logger instance lazily to avoid import-time config loading."""
    return get_logger(__name__)


class StoryListing(str, Enum):
    """Ranked story id listings published by the API."""

    TOP = "topstories"
    NEW = "newstories"
    BEST = "beststories"
    ASK = "askstories"
    SHOW = "showstories"
    JOB = "jobstories"


_MISSING = object()

_INT_ADAPTER: TypeAdapter[int] = TypeAdapter(int)
_UPDATES_ADAPTER: TypeAdapter[Updates] = TypeAdapter(Updates)


class HackerNewsClient:
    """Async client for the Hacker News API.

    The client is safe to share between concurrent tasks; connection pooling
    is handled by httpx.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Create a client.

        Args:
            base_url: API root, defaults to HN_API_BASE_URL
            timeout: Overall per-call timeout in seconds, defaults to HN_API_TIMEOUT
            http_client: Pre-built httpx client (tests inject one with a
                MockTransport). The caller keeps ownership of it.
        """
        settings = get_settings()
        self.base_url = (base_url or settings.HN_API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.HN_API_TIMEOUT
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=httpx.Timeout(self.timeout))

    async def __aenter__(self) -> "HackerNewsClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying connection pool if this client created it."""
        if self._owns_http_client:
            await self._http.aclose()

    async def fetch_item(self, item_id: int) -> Optional[Item]:
        """Return the item with the given id.

        Args:
            item_id: Item id; not validated beyond being an integer

        Returns:
            The decoded item, or None if the id does not exist

        Raises:
            TransportError: If the request fails or times out
            DecodeError: If the body is not a recognised item
        """
        endpoint = f"item/{item_id}.json"
        return self._decode(endpoint, ITEM_ADAPTER, await self._get_json(endpoint))

    async def fetch_user(self, username: str) -> Optional[User]:
        """Return the profile of ``username`` (case-sensitive), or None."""
        endpoint = f"user/{quote(username, safe='')}.json"
        return self._decode(endpoint, USER_ADAPTER, await self._get_json(endpoint))

    async def fetch_list(self, listing: StoryListing | str) -> list[int]:
        """Return the ordered story ids of a listing such as top or new stories.

        Raises:
            NotFoundError: If the listing is null upstream
        """
        listing = StoryListing(listing)
        endpoint = f"{listing.value}.json"
        data = await self._get_json(endpoint)
        if data is None or data is _MISSING:
            raise NotFoundError("Listing returned no data", endpoint=endpoint)
        return self._decode(endpoint, ID_LIST_ADAPTER, data)

    async def fetch_max_item_id(self) -> int:
        """Return the id of the newest item."""
        endpoint = "maxitem.json"
        data = await self._get_json(endpoint)
        if data is None or data is _MISSING:
            raise NotFoundError("Max item id returned no data", endpoint=endpoint)
        return self._decode(endpoint, _INT_ADAPTER, data)

    async def fetch_updates(self) -> Updates:
        """Return recently changed item ids and usernames."""
        endpoint = "updates.json"
        data = await self._get_json(endpoint)
        if data is None or data is _MISSING:
            raise NotFoundError("Updates returned no data", endpoint=endpoint)
        return self._decode(endpoint, _UPDATES_ADAPTER, data)

    async def _get_json(self, endpoint: str) -> Any:
        """GET ``endpoint`` and parse the JSON body.

        The request and the body read together are bounded by ``self.timeout``;
        httpx timeouts alone only limit each network phase.

        Returns the sentinel ``_MISSING`` for an empty body.
        """
        url = f"{self.base_url}/{endpoint}"
        try:
            response = await asyncio.wait_for(
                self._http.get(url, timeout=self.timeout), self.timeout
            )
            response.raise_for_status()
        except asyncio.TimeoutError as e:
            raise TransportError(
                f"Request exceeded the {self.timeout}s timeout", endpoint=endpoint
            ) from e
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"Upstream responded with {e.response.status_code}",
                endpoint=endpoint,
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(
                f"Request failed: {e.__class__.__name__}: {e}", endpoint=endpoint
            ) from e

        if not response.content.strip():
            return _MISSING

        try:
            return response.json()  # httpx.json() is synchronous
        except ValueError as e:
            raise DecodeError(
                "Response body is not valid JSON",
                endpoint=endpoint,
                status_code=response.status_code,
            ) from e

    @staticmethod
    def _decode(endpoint: str, adapter: TypeAdapter, data: Any) -> Any:
        if data is _MISSING:
            return None
        try:
            return adapter.validate_python(data)
        except ValidationError as e:
            _get_logger().debug(f"Failed to decode {endpoint}: {e}")
            raise DecodeError(
                f"Unexpected response shape: {e.error_count()} validation error(s)",
                endpoint=endpoint,
            ) from e
