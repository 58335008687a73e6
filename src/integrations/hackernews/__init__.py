"""Hacker News Firebase API integration."""

from src.integrations.hackernews.client import HackerNewsClient, StoryListing
from src.integrations.hackernews.errors import (
    DecodeError,
    HackerNewsError,
    NotFoundError,
    TransportError,
)
from src.integrations.hackernews.models import Comment, Job, Poll, PollOpt, Story, Updates, User

__all__ = [
    "HackerNewsClient",
    "StoryListing",
    "HackerNewsError",
    "TransportError",
    "DecodeError",
    "NotFoundError",
    "Story",
    "Comment",
    "Job",
    "Poll",
    "PollOpt",
    "User",
    "Updates",
]
