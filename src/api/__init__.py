"""GraphQL API over the Hacker News Firebase API."""

from src.api.app import create_app
from src.api.context import build_context
from src.api.schema import schema

__all__ = [
    "create_app",
    "build_context",
    "schema",
]
