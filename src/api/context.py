"""Per-request GraphQL context."""

from typing import Any

from fastapi import Request

from src.integrations.hackernews.client import HackerNewsClient
from src.loaders.hackernews import create_item_loader, create_user_loader


def build_context(client: HackerNewsClient) -> dict[str, Any]:
    """Build the resolver context for one GraphQL request.

    The client (and its connection pool) is shared by the whole process;
    loaders are created fresh so nothing is reused across requests.
    """
    return {
        "client": client,
        "item_loader": create_item_loader(client),
        "user_loader": create_user_loader(client),
    }


async def get_context(request: Request) -> dict[str, Any]:
    """FastAPI dependency passed to the GraphQL router as its context getter."""
    return build_context(request.app.state.hn_client)
