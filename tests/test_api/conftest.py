"""Fixtures for GraphQL API tests."""

import asyncio

import pytest

from src.integrations.hackernews.client import StoryListing
from src.integrations.hackernews.errors import NotFoundError
from src.integrations.hackernews.models import (
    Comment,
    Job,
    Poll,
    PollOpt,
    Story,
    Updates,
    User,
)


class FakeHackerNews:
    """In-memory stand-in for HackerNewsClient recording every call.

    Values stored as exceptions are raised when fetched.
    """

    base_url = "https://hn.test/v0"

    def __init__(self, items=None, listings=None, users=None):
        self.items = items or {}
        self.listings = listings or {}
        self.users = users or {}
        self.item_calls: list[int] = []
        self.user_calls: list[str] = []
        self.list_calls: list[StoryListing] = []

    async def fetch_item(self, item_id):
        self.item_calls.append(item_id)
        await asyncio.sleep(0)
        return self._value(self.items.get(item_id))

    async def fetch_user(self, username):
        self.user_calls.append(username)
        await asyncio.sleep(0)
        return self._value(self.users.get(username))

    async def fetch_list(self, listing):
        listing = StoryListing(listing)
        self.list_calls.append(listing)
        if listing not in self.listings:
            raise NotFoundError("Listing returned no data", endpoint=f"{listing.value}.json")
        return self._value(self.listings[listing])

    async def fetch_max_item_id(self):
        return 9130260

    async def fetch_updates(self):
        return Updates(items=[8423305, 8420805], profiles=["thefox", "mdda"])

    async def aclose(self):
        pass

    @staticmethod
    def _value(value):
        if isinstance(value, Exception):
            raise value
        return value


def story(item_id, kids=None, by="pg"):
    return Story(id=item_id, by=by, score=100, title=f"Story {item_id}", time=1, kids=kids)


def comment(item_id, parent, kids=None, by="norvig"):
    return Comment(id=item_id, by=by, parent=parent, text=f"Comment {item_id}", time=2, kids=kids)


@pytest.fixture
def hn() -> FakeHackerNews:
    """A small front page: two stories with overlapping comment threads."""
    return FakeHackerNews(
        items={
            101: story(101, kids=[201, 202]),
            102: story(102, kids=[203]),
            103: story(103),
            201: comment(201, parent=101, kids=[301]),
            202: comment(202, parent=101),
            203: comment(203, parent=102),
            301: comment(301, parent=201),
            400: Job(id=400, title="Hiring", score=1, time=3, url="https://jobs.test"),
            500: Poll(id=500, by="pg", score=7, title="Poll?", time=4, parts=[501, 502]),
            501: PollOpt(id=501, by="pg", poll=500, score=5, text="Yes", time=4),
            502: PollOpt(id=502, by="pg", poll=500, score=2, text="No", time=4),
        },
        listings={
            StoryListing.TOP: [101, 102, 103],
            StoryListing.JOB: [400],
        },
        users={
            "pg": User(id="pg", created=1160418092, karma=155111, submitted=[500, 101]),
        },
    )
