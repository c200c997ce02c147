"""
Error taxonomy for the blogging service.

Every failure the core can signal is a ``BloggingError`` tagged with an
``ErrorKind``.  The subclasses only pin the kind so call sites can raise
and catch them by type; the HTTP layer maps kinds to status codes in
``blogging.error_handlers``.
"""
from enum import StrEnum


class ErrorKind(StrEnum):
    NULL_ARGUMENT = "NULL_ARGUMENT"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    NOT_FOUND = "NOT_FOUND"
    STORAGE = "STORAGE"
    CONSISTENCY = "CONSISTENCY"


class BloggingError(Exception):
    """Base error: a kind, a human readable message and an optional cause."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        cause: BaseException | None = None,
    ) -> None:
        self.kind = kind
        self.message = message
        self.cause = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause


class NullArgumentError(BloggingError):
    """A required field or argument was absent."""

    def __init__(self, message: str) -> None:
        super().__init__(ErrorKind.NULL_ARGUMENT, message)


class InvalidArgumentError(BloggingError):
    """A field failed a validation predicate."""

    def __init__(self, message: str) -> None:
        super().__init__(ErrorKind.INVALID_ARGUMENT, message)


class PostNotFoundError(BloggingError):
    def __init__(self, post_id: int | None = None) -> None:
        message = "Post not found" if post_id is None else f"Post not found: {post_id}"
        super().__init__(ErrorKind.NOT_FOUND, message)
        self.post_id = post_id


class StorageError(BloggingError):
    """The database failed to execute a statement or to connect."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(ErrorKind.STORAGE, message, cause)


class ConsistencyError(BloggingError):
    """
    A write reported success but the mandatory re-read found nothing.

    Never expected in correct operation; surfaced as a 500.
    """

    def __init__(self, message: str) -> None:
        super().__init__(ErrorKind.CONSISTENCY, message)
