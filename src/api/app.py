"""FastAPI application serving the GraphQL endpoint."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from strawberry.fastapi import GraphQLRouter

from src.api.context import get_context
from src.api.schema import schema
from src.integrations.hackernews.client import HackerNewsClient
from src.utils.config import get_settings
from src.utils.logging_config import get_logger, setup_logging


def _get_logger():
    """Get logger instance lazily to avoid import-time config loading."""
    return get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the shared Hacker News client unless one was injected."""
    setup_logging()
    owns_client = app.state.hn_client is None
    if owns_client:
        app.state.hn_client = HackerNewsClient()
    _get_logger().info(f"Upstream API: {app.state.hn_client.base_url}")

    try:
        yield
    finally:
        if owns_client:
            await app.state.hn_client.aclose()
            app.state.hn_client = None


def create_app(client: HackerNewsClient | None = None) -> FastAPI:
    """Build the application.

    Args:
        client: Client to use instead of creating one at startup. The caller
            remains responsible for closing it.

    Returns:
        FastAPI app with GraphQL (and the GraphiQL IDE) mounted at "/"
    """
    settings = get_settings()
    app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG, lifespan=lifespan)
    app.state.hn_client = client

    graphql_router = GraphQLRouter(
        schema,
        path="/",
        context_getter=get_context,
        graphql_ide="graphiql",
    )
    app.include_router(graphql_router)
    return app
