"""GraphQL schema over the Hacker News API.

Every item lookup goes through the per-request ``item_loader`` in the
GraphQL context, so sibling fields resolved in the same pass (the kids of
every story on a page, for instance) share one batch of upstream calls.
Items that fail to load are left out of list fields and render as null
in singular fields.
"""

from collections.abc import Sequence
from typing import Optional

import strawberry
from strawberry.types import Info

from src.integrations.hackernews import models
from src.integrations.hackernews.client import HackerNewsClient, StoryListing
from src.loaders.hackernews import ItemLoader, UserLoader
from src.utils.config import get_settings


@strawberry.interface(description="An API item, for example a story or a comment.")
class Item:
    id: int
    title: Optional[str]
    author: Optional[str]


@strawberry.type(description="A story.")
class Story(Item):
    descendants: int
    score: int
    url: Optional[str]
    text: Optional[str]
    time: int
    kids: list[int]

    @strawberry.field(description="The story's comments, in ranked display order.")
    async def kids_connection(self, info: Info, limit: Optional[int] = None) -> list[Item]:
        return await load_items(info, take(self.kids, limit))


@strawberry.type(description="A comment.")
class Comment(Item):
    parent: int
    text: Optional[str]
    time: int
    kids: list[int]

    @strawberry.field(description="Replies to this comment, in ranked display order.")
    async def kids_connection(self, info: Info, limit: Optional[int] = None) -> list[Item]:
        return await load_items(info, take(self.kids, limit))


@strawberry.type(description="A job.")
class Job(Item):
    score: int
    text: Optional[str]
    time: int
    url: Optional[str]


@strawberry.type(description="A poll.")
class Poll(Item):
    descendants: int
    score: int
    text: Optional[str]
    time: int
    kids: list[int]
    parts: list[int]

    @strawberry.field(description="The poll's comments, in ranked display order.")
    async def kids_connection(self, info: Info, limit: Optional[int] = None) -> list[Item]:
        return await load_items(info, take(self.kids, limit))

    @strawberry.field(description="The poll's options, in display order.")
    async def parts_connection(self, info: Info) -> list[Item]:
        return await load_items(info, self.parts)


@strawberry.type(description="A poll option belonging to a poll.")
class PollOpt(Item):
    poll: int
    score: int
    text: Optional[str]
    time: int


@strawberry.type(description="A user profile.")
class User:
    id: str
    created: int
    karma: int
    delay: Optional[int]
    about: Optional[str]
    submitted: list[int]

    @strawberry.field(description="The user's stories, polls and comments, newest first.")
    async def submitted_connection(self, info: Info, limit: Optional[int] = None) -> list[Item]:
        return await load_items(info, take(self.submitted, limit))


@strawberry.type(description="Recently changed items and profiles.")
class Updates:
    items: list[int]
    profiles: list[str]


def to_graphql(item: models.Item) -> Item:
    """Convert a decoded API item into its GraphQL type."""
    common = {"id": item.id, "title": item.title, "author": item.author}

    if isinstance(item, models.Story):
        return Story(
            **common,
            descendants=item.descendants,
            score=item.score,
            url=item.url,
            text=item.text,
            time=item.time,
            kids=item.kids or [],
        )
    if isinstance(item, models.Comment):
        return Comment(
            **common, parent=item.parent, text=item.text, time=item.time, kids=item.kids or []
        )
    if isinstance(item, models.Job):
        return Job(**common, score=item.score, text=item.text, time=item.time, url=item.url)
    if isinstance(item, models.Poll):
        return Poll(
            **common,
            descendants=item.descendants,
            score=item.score,
            text=item.text,
            time=item.time,
            kids=item.kids or [],
            parts=item.parts or [],
        )
    if isinstance(item, models.PollOpt):
        return PollOpt(**common, poll=item.poll, score=item.score, text=item.text, time=item.time)
    raise TypeError(f"Unsupported item type: {type(item).__name__}")


def user_to_graphql(user: models.User) -> User:
    return User(
        id=user.id,
        created=user.created,
        karma=user.karma,
        delay=user.delay,
        about=user.about,
        submitted=list(user.submitted),
    )


def take(ids: Sequence[int], limit: Optional[int]) -> list[int]:
    """Return the first ``limit`` ids, or all of them when limit is None."""
    if limit is None:
        return list(ids)
    if limit < 0:
        raise ValueError("Limit must not be negative")
    return list(ids[:limit])


async def load_items(info: Info, ids: Sequence[int]) -> list[Item]:
    """Batch-load ``ids`` in order, skipping the ones that did not resolve."""
    loader: ItemLoader = info.context["item_loader"]
    return [to_graphql(item) for item in await loader.load_many(ids) if item is not None]


async def _listing(info: Info, listing: StoryListing, limit: Optional[int]) -> list[Item]:
    client: HackerNewsClient = info.context["client"]
    if limit is None:
        limit = get_settings().DEFAULT_LIST_LIMIT
    ids = take(await client.fetch_list(listing), limit)
    return await load_items(info, ids)


@strawberry.type
class Query:
    @strawberry.field(description="Top stories.")
    async def top(self, info: Info, limit: Optional[int] = None) -> list[Item]:
        return await _listing(info, StoryListing.TOP, limit)

    @strawberry.field(description="Newest stories.")
    async def new(self, info: Info, limit: Optional[int] = None) -> list[Item]:
        return await _listing(info, StoryListing.NEW, limit)

    @strawberry.field(description="Best stories.")
    async def best(self, info: Info, limit: Optional[int] = None) -> list[Item]:
        return await _listing(info, StoryListing.BEST, limit)

    @strawberry.field(description="Latest Ask HN stories.")
    async def ask(self, info: Info, limit: Optional[int] = None) -> list[Item]:
        return await _listing(info, StoryListing.ASK, limit)

    @strawberry.field(description="Latest Show HN stories.")
    async def show(self, info: Info, limit: Optional[int] = None) -> list[Item]:
        return await _listing(info, StoryListing.SHOW, limit)

    @strawberry.field(description="Latest job stories.")
    async def jobs(self, info: Info, limit: Optional[int] = None) -> list[Item]:
        return await _listing(info, StoryListing.JOB, limit)

    @strawberry.field(description="A single item by id.")
    async def item(self, info: Info, id: int) -> Optional[Item]:
        loader: ItemLoader = info.context["item_loader"]
        found = await loader.load(id)
        return to_graphql(found) if found is not None else None

    @strawberry.field(description="A user profile by case-sensitive username.")
    async def user(self, info: Info, username: str) -> Optional[User]:
        loader: UserLoader = info.context["user_loader"]
        found = await loader.load(username)
        return user_to_graphql(found) if found is not None else None

    @strawberry.field(description="The id of the newest item.")
    async def max_item(self, info: Info) -> int:
        client: HackerNewsClient = info.context["client"]
        return await client.fetch_max_item_id()

    @strawberry.field(description="Recently changed items and profiles.")
    async def updates(self, info: Info) -> Updates:
        client: HackerNewsClient = info.context["client"]
        result = await client.fetch_updates()
        return Updates(items=list(result.items), profiles=list(result.profiles))


schema = strawberry.Schema(query=Query, types=[Story, Comment, Job, Poll, PollOpt])
