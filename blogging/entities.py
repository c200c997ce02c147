"""
Post domain entity.

A ``Post`` validates and normalises its fields before anything is
assigned, so an instance either exists fully formed or not at all.
After construction only ``id`` may change (it is assigned by the
database on first insert).
"""
from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from blogging.errors import InvalidArgumentError, NullArgumentError


def normalize_tags(tags: Iterable[str | None] | None) -> tuple[str, ...]:
    """
    Return *tags* stripped, upper-cased and de-duplicated.

    ``None`` and blank entries are dropped; the first occurrence of each
    normalised value wins, so input order is otherwise preserved.
    """
    if tags is None:
        raise NullArgumentError("Tag list cannot be NULL")

    normalized: dict[str, None] = {}
    for tag in tags:
        if tag is None or not tag.strip():
            continue
        normalized.setdefault(tag.strip().upper())
    return tuple(normalized)


def _validate_text(value: str | None, field_name: str) -> str:
    if value is None:
        raise NullArgumentError(f"{field_name} cannot be NULL")
    if not value.strip():
        raise InvalidArgumentError(f"{field_name} cannot be EMPTY or BLANK")
    return value.strip()


class Post:
    """
    A short-form article with a normalised tag set.

    Use ``Post.create`` for a brand-new post (``updated_at`` equals
    ``created_at``) and the constructor to rebuild one from storage.

    Equality ignores ``id``: two posts are equal when their title,
    content, category, tags and both timestamps match.
    """

    __slots__ = ("_id", "_title", "_content", "_category", "_tags", "_created_at", "_updated_at")

    def __init__(
        self,
        title: str | None,
        content: str | None,
        category: str | None,
        tags: Iterable[str | None] | None,
        created_at: datetime | None,
        updated_at: datetime | None,
        id: int = 0,
    ) -> None:
        title = _validate_text(title, "Title")
        content = _validate_text(content, "Content")
        category = _validate_text(category, "Category")
        normalized_tags = normalize_tags(tags)
        if created_at is None:
            raise NullArgumentError("Created Time cannot be NULL")
        if updated_at is None:
            raise NullArgumentError("Updated Time cannot be NULL")
        if updated_at < created_at:
            raise InvalidArgumentError("Updated Time cannot be before the Created Time")

        self._id = id
        self._title = title
        self._content = content
        self._category = category
        self._tags = normalized_tags
        self._created_at = created_at
        self._updated_at = updated_at

    @classmethod
    def create(
        cls,
        title: str | None,
        content: str | None,
        category: str | None,
        tags: Iterable[str | None] | None,
        created_at: datetime | None,
    ) -> Post:
        return cls(title, content, category, tags, created_at, created_at)

    @property
    def id(self) -> int:
        return self._id

    @id.setter
    def id(self, value: int) -> None:
        self._id = value

    @property
    def title(self) -> str:
        return self._title

    @property
    def content(self) -> str:
        return self._content

    @property
    def category(self) -> str:
        return self._category

    @property
    def tags(self) -> tuple[str, ...]:
        return self._tags

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    def _key(self) -> tuple:
        return (
            self._title,
            self._content,
            self._category,
            self._tags,
            self._created_at,
            self._updated_at,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Post):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return (
            f"Post(id={self._id!r}, title={self._title!r}, category={self._category!r}, "
            f"tags={list(self._tags)!r}, created_at={self._created_at!r}, "
            f"updated_at={self._updated_at!r})"
        )
