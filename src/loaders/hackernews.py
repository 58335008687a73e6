"""Batch loaders over the Hacker News client."""

from src.integrations.hackernews.client import HackerNewsClient
from src.integrations.hackernews.models import Item, User
from src.loaders.batch_loader import BatchLoader
from src.utils.config import get_settings

ItemLoader = BatchLoader[int, Item]
UserLoader = BatchLoader[str, User]


def create_item_loader(
    client: HackerNewsClient,
    *,
    delay: float | None = None,
    raise_errors: bool | None = None,
) -> ItemLoader:
    """Create a loader batching item lookups by id.

    Args:
        client: Shared Hacker News client
        delay: Window delay, defaults to BATCH_WINDOW_DELAY
        raise_errors: Strict error mode, defaults to LOADER_RAISE_ERRORS

    Returns:
        BatchLoader keyed by item id
    """
    settings = get_settings()
    return BatchLoader(
        client.fetch_item,
        delay=settings.BATCH_WINDOW_DELAY if delay is None else delay,
        raise_errors=settings.LOADER_RAISE_ERRORS if raise_errors is None else raise_errors,
        name="items",
    )


def create_user_loader(
    client: HackerNewsClient,
    *,
    delay: float | None = None,
    raise_errors: bool | None = None,
) -> UserLoader:
    """Create a loader batching user profile lookups by username."""
    settings = get_settings()
    return BatchLoader(
        client.fetch_user,
        delay=settings.BATCH_WINDOW_DELAY if delay is None else delay,
        raise_errors=settings.LOADER_RAISE_ERRORS if raise_errors is None else raise_errors,
        name="users",
    )
