from functools import lru_cache

from blogging.database import async_session
from blogging.repository import PostRepository
from blogging.services.post_service import PostService


@lru_cache
def get_post_service() -> PostService:
    """
    FastAPI dependency returning the process-wide ``PostService``.

    The service and repository are stateless, so one instance is shared;
    each repository call still opens its own session from
    ``async_session``.  Tests replace this dependency through
    ``app.dependency_overrides`` to point at an in-memory database.
    """
    return PostService(PostRepository(async_session))
