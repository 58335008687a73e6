"""Hacker News item and user models.

Items form a closed set of variants discriminated on the upstream ``type``
field. Every variant exposes the same minimal accessors (``id``, ``title``,
``author``) while carrying its own full field set.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class _ItemBase(BaseModel):
    """Fields every item variant shares."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: int = Field(ge=0)
    time: int
    deleted: bool = False
    dead: bool = False


class Story(_ItemBase):
    """A story."""

    type: Literal["story"] = "story"
    by: str
    descendants: int = 0
    kids: Optional[list[int]] = None
    score: int
    title: str
    url: Optional[str] = None
    text: Optional[str] = None

    @property
    def author(self) -> Optional[str]:
        return self.by


class Comment(_ItemBase):
    """A comment.

    Deleted comments come back without ``by`` and ``text``, so both are optional.
    """

    type: Literal["comment"] = "comment"
    by: Optional[str] = None
    kids: Optional[list[int]] = None
    parent: int
    text: Optional[str] = None

    @property
    def title(self) -> Optional[str]:
        return None

    @property
    def author(self) -> Optional[str]:
        return self.by


class Job(_ItemBase):
    """A job posting."""

    type: Literal["job"] = "job"
    by: Optional[str] = None
    score: int = 0
    text: Optional[str] = None
    title: str
    url: Optional[str] = None

    @property
    def author(self) -> Optional[str]:
        return self.by


class Poll(_ItemBase):
    """A poll."""

    type: Literal["poll"] = "poll"
    by: str
    descendants: int = 0
    kids: Optional[list[int]] = None
    parts: Optional[list[int]] = None
    score: int
    title: str
    text: Optional[str] = None

    @property
    def author(self) -> Optional[str]:
        return self.by


class PollOpt(_ItemBase):
    """A poll option belonging to a poll."""

    type: Literal["pollopt"] = "pollopt"
    by: str
    poll: int
    score: int
    text: Optional[str] = None

    @property
    def title(self) -> Optional[str]:
        return None

    @property
    def author(self) -> Optional[str]:
        return self.by


Item = Annotated[
    Union[Story, Comment, Job, Poll, PollOpt],
    Field(discriminator="type"),
]


class User(BaseModel):
    """A user profile."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    created: int
    karma: int
    delay: Optional[int] = None
    about: Optional[str] = None
    submitted: list[int] = Field(default_factory=list)


class Updates(BaseModel):
    """Recently changed items and profiles."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    items: list[int] = Field(default_factory=list)
    profiles: list[str] = Field(default_factory=list)


# Adapters accept JSON null and map it to None
ITEM_ADAPTER: TypeAdapter[Optional[Item]] = TypeAdapter(Optional[Item])
USER_ADAPTER: TypeAdapter[Optional[User]] = TypeAdapter(Optional[User])
ID_LIST_ADAPTER: TypeAdapter[list[int]] = TypeAdapter(list[int])
