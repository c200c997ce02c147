"""
Post service: orchestrates entity construction, persistence and
not-found semantics for the five post operations.

The service holds no state of its own beyond its collaborators: a
repository that owns every transaction, and a clock so tests can pin
"now".  ``PostNotFoundError`` is raised here and only here, both for an
empty lookup and for an update/delete that matched zero rows.
"""
from collections.abc import Callable
from datetime import datetime, timezone

from blogging.entities import Post
from blogging.errors import NullArgumentError, PostNotFoundError
from blogging.mappers import to_new_post, to_response, to_updated_post
from blogging.repository import PostRepository
from blogging.schemas import PostRequest, PostResponse


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _require_request(request: PostRequest | None) -> PostRequest:
    if request is None:
        raise NullArgumentError("Requested Post Data cannot be NULL")
    return request


class PostService:
    def __init__(
        self,
        repository: PostRepository,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repository = repository
        self._clock = clock

    async def create_post(self, request: PostRequest | None) -> PostResponse:
        request = _require_request(request)
        saved = await self._repository.save(to_new_post(request, self._clock()))
        return to_response(saved)

    async def update_post(self, post_id: int, request: PostRequest | None) -> PostResponse:
        """
        Replace the caller-controlled fields of post *post_id*.

        A post deleted between the lookup and the update is reported the
        same way as one that never existed.
        """
        request = _require_request(request)
        existing = await self._fetch_post(post_id)
        updated = await self._repository.update(
            to_updated_post(request, existing, self._clock())
        )
        if updated is None:
            raise PostNotFoundError(post_id)
        return to_response(updated)

    async def delete_post(self, post_id: int) -> None:
        if not await self._repository.delete_by_id(post_id):
            raise PostNotFoundError(post_id)

    async def get_post(self, post_id: int) -> PostResponse:
        return to_response(await self._fetch_post(post_id))

    async def search_posts(self, term: str = "") -> list[PostResponse]:
        posts = await self._repository.find_by_search_term(term)
        return [to_response(post) for post in posts]

    async def _fetch_post(self, post_id: int) -> Post:
        post = await self._repository.find_by_id(post_id)
        if post is None:
            raise PostNotFoundError(post_id)
        return post
