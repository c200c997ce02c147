"""
Conversions between the wire shapes and the ``Post`` entity.

Nothing here validates: the entity constructor does.  What this module
does decide is which fields the caller controls (title, content,
category, tags) and which the server owns (id and both timestamps).
"""
from datetime import datetime

from blogging.entities import Post
from blogging.schemas import PostRequest, PostResponse


def to_new_post(request: PostRequest, created_at: datetime) -> Post:
    return Post.create(
        request.title,
        request.content,
        request.category,
        request.tags,
        created_at,
    )


def to_updated_post(request: PostRequest, original: Post, updated_at: datetime) -> Post:
    """Apply *request* on top of *original*, keeping its id and created_at."""
    post = Post(
        request.title,
        request.content,
        request.category,
        request.tags,
        original.created_at,
        updated_at,
    )
    post.id = original.id
    return post


def to_response(post: Post) -> PostResponse:
    return PostResponse(
        id=post.id,
        title=post.title,
        content=post.content,
        category=post.category,
        tags=list(post.tags),
        created_at=post.created_at,
        updated_at=post.updated_at,
    )
