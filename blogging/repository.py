"""
Post repository: the persistence engine for posts and their tags.

Design notes
------------
- Every public method opens its own session from the injected factory
  and delimits its own transaction with ``session.begin()``.  An
  exception raised inside that block rolls the transaction back before
  it propagates, so a post row and its tag rows are never committed
  half-written.
- Writes re-read the post after touching it and return what the
  database now holds.  A missing row at that point is a
  ``ConsistencyError``: it means the write "succeeded" without leaving
  anything behind.
- ``update`` and ``delete_by_id`` report "no such row" through their
  return value (``None`` / ``False``), never by raising, so the service
  can tell "zero rows" apart from a storage failure.
- Ids outside ``1..MAX_POST_ID`` cannot name a stored row and are
  answered as "no such row" without touching the database.
- Every ``SQLAlchemyError`` is re-raised as ``StorageError`` with the
  original exception attached.
- Search fetches tags with one query per matching post.  Result sets are
  expected to be small; the round-trips are accepted in exchange for the
  simpler query shape.
"""
import logging
from collections.abc import Iterable
from datetime import datetime, timezone

from sqlalchemy import delete, insert, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from blogging.entities import Post
from blogging.errors import ConsistencyError, StorageError
from blogging.models import MAX_POST_ID, PostRecord, PostTagRecord

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _as_utc(value: datetime) -> datetime:
    """Return *value* in UTC; naive values (SQLite) are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _is_storable_id(post_id: int) -> bool:
    # Drivers refuse to bind ints outside the id column's range.
    return 1 <= post_id <= MAX_POST_ID


def _to_entity(record: PostRecord, tags: list[str]) -> Post:
    return Post(
        record.title,
        record.content,
        record.category,
        tags,
        _as_utc(record.created_at),
        _as_utc(record.updated_at),
        id=record.id,
    )


async def _insert_post(session: AsyncSession, post: Post) -> int:
    stmt = (
        insert(PostRecord)
        .values(
            title=post.title,
            content=post.content,
            category=post.category,
            created_at=_as_utc(post.created_at),
            updated_at=_as_utc(post.updated_at),
        )
        .returning(PostRecord.id)
    )
    return (await session.execute(stmt)).scalar_one()


async def _insert_post_tags(session: AsyncSession, post_id: int, tags: Iterable[str]) -> None:
    rows = [{"post_id": post_id, "tag_name": tag} for tag in tags]
    if rows:
        await session.execute(insert(PostTagRecord), rows)


async def _update_post(session: AsyncSession, post: Post) -> bool:
    stmt = (
        update(PostRecord)
        .where(PostRecord.id == post.id)
        .values(
            title=post.title,
            content=post.content,
            category=post.category,
            updated_at=_as_utc(post.updated_at),
        )
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)
    return result.rowcount == 1


async def _delete_post_tags(session: AsyncSession, post_id: int) -> None:
    await session.execute(
        delete(PostTagRecord)
        .where(PostTagRecord.post_id == post_id)
        .execution_options(synchronize_session=False)
    )


async def _delete_post(session: AsyncSession, post_id: int) -> bool:
    result = await session.execute(
        delete(PostRecord)
        .where(PostRecord.id == post_id)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def _select_post_tags(session: AsyncSession, post_id: int) -> list[str]:
    result = await session.execute(
        select(PostTagRecord.tag_name)
        .where(PostTagRecord.post_id == post_id)
        .order_by(PostTagRecord.id)
    )
    return list(result.scalars().all())


async def _fetch_post(session: AsyncSession, post_id: int) -> Post | None:
    result = await session.execute(select(PostRecord).where(PostRecord.id == post_id))
    record = result.scalar_one_or_none()
    if record is None:
        return None
    return _to_entity(record, await _select_post_tags(session, post_id))


async def _fetch_posts(session: AsyncSession, term: str) -> list[Post]:
    q = select(PostRecord).where(
        or_(
            PostRecord.title.icontains(term, autoescape=True),
            PostRecord.content.icontains(term, autoescape=True),
            PostRecord.category.icontains(term, autoescape=True),
        )
    )
    records = (await session.execute(q)).scalars().all()

    posts: list[Post] = []
    for record in records:
        posts.append(_to_entity(record, await _select_post_tags(session, record.id)))
    return posts


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------

class PostRepository:
    """Transactional reads and writes over ``posts`` and ``post_tags``."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def save(self, post: Post) -> Post:
        """
        Insert *post* and its tags, returning the stored post with its
        generated id.
        """
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    post_id = await _insert_post(session, post)
                    await _insert_post_tags(session, post_id, post.tags)
                    saved = await _fetch_post(session, post_id)
                    if saved is None:
                        raise ConsistencyError("Unable to find the saved post")
        except SQLAlchemyError as exc:
            raise StorageError("Failed to save the post", exc) from exc

        logger.info("Saved post %s with %d tag(s)", saved.id, len(saved.tags))
        return saved

    async def update(self, post: Post) -> Post | None:
        """
        Overwrite the post row identified by ``post.id`` and replace its
        tags wholesale.

        Returns None, leaving every table untouched, when no row has that id.
        """
        if not _is_storable_id(post.id):
            return None
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    if not await _update_post(session, post):
                        logger.info("Update matched no post with id %s", post.id)
                        return None
                    await _delete_post_tags(session, post.id)
                    await _insert_post_tags(session, post.id, post.tags)
                    updated = await _fetch_post(session, post.id)
                    if updated is None:
                        raise ConsistencyError("Unable to find the updated post")
        except SQLAlchemyError as exc:
            raise StorageError("Failed to update the post", exc) from exc

        logger.info("Updated post %s", updated.id)
        return updated

    async def delete_by_id(self, post_id: int) -> bool:
        """Delete the post and its tag rows; True when exactly one post went."""
        if not _is_storable_id(post_id):
            return False
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await _delete_post_tags(session, post_id)
                    deleted = await _delete_post(session, post_id)
        except SQLAlchemyError as exc:
            raise StorageError("Failed to delete the post", exc) from exc

        if deleted:
            logger.info("Deleted post %s", post_id)
        return deleted

    async def find_by_id(self, post_id: int) -> Post | None:
        if not _is_storable_id(post_id):
            return None
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    return await _fetch_post(session, post_id)
        except SQLAlchemyError as exc:
            raise StorageError("Failed to find the post", exc) from exc

    async def find_by_search_term(self, term: str) -> list[Post]:
        """
        Return posts whose title, content or category contains *term*,
        ignoring case.  An empty term matches every post.
        """
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    posts = await _fetch_posts(session, term)
        except SQLAlchemyError as exc:
            raise StorageError("Failed to find the posts", exc) from exc

        logger.debug("Search for %r matched %d post(s)", term, len(posts))
        return posts
