"""Request batching between GraphQL resolvers and the upstream API."""

from src.loaders.batch_loader import BatchLoader, BatchResult
from src.loaders.hackernews import (
    ItemLoader,
    UserLoader,
    create_item_loader,
    create_user_loader,
)

__all__ = [
    "BatchLoader",
    "BatchResult",
    "ItemLoader",
    "UserLoader",
    "create_item_loader",
    "create_user_loader",
]
