"""Turn every failure into a plain-text HTTP response."""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse

from blogging.errors import BloggingError, ErrorKind

logger = logging.getLogger(__name__)

_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.NULL_ARGUMENT: 400,
    ErrorKind.INVALID_ARGUMENT: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.STORAGE: 500,
    ErrorKind.CONSISTENCY: 500,
}

NOT_FOUND_BODY = "Post not found"


def status_for(kind: ErrorKind) -> int:
    return _STATUS_BY_KIND.get(kind, 500)


def describe_validation_error(exc: RequestValidationError) -> str:
    """One line per offending field, e.g. ``tags: Input should be a valid list``."""
    lines = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"] if part != "body")
        lines.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(lines)


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the error handlers on *app*."""

    @app.exception_handler(BloggingError)
    async def blogging_error_handler(request: Request, exc: BloggingError) -> PlainTextResponse:
        status_code = status_for(exc.kind)
        if status_code >= 500:
            logger.error(
                "%s %s failed with %s: %s",
                request.method, request.url.path, exc.kind, exc.message,
                exc_info=exc,
            )
        else:
            logger.info("%s %s rejected with %s: %s", request.method, request.url.path, exc.kind, exc.message)

        body = NOT_FOUND_BODY if exc.kind is ErrorKind.NOT_FOUND else exc.message
        return PlainTextResponse(body, status_code=status_code)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> PlainTextResponse:
        message = describe_validation_error(exc)
        logger.info("%s %s rejected as malformed: %s", request.method, request.url.path, message)
        return PlainTextResponse(message, status_code=400)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> PlainTextResponse:
        logger.error(
            "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc,
        )
        return PlainTextResponse(str(exc) or "Internal server error", status_code=500)
