import logging
import time
from contextvars import ContextVar

from sqlalchemy import event
from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from blogging.config import settings

logger = logging.getLogger(__name__)

TAG_TABLE = "post_tags"


class StatementTally:
    """SQL statements issued while serving one request."""

    __slots__ = ("total", "tag_statements")

    def __init__(self) -> None:
        self.total = 0
        self.tag_statements = 0

    def record(self, statement: str) -> None:
        self.total += 1
        if TAG_TABLE in statement:
            self.tag_statements += 1


# None outside a request: statements from tests or startup go uncounted.
current_tally: ContextVar[StatementTally | None] = ContextVar("statement_tally", default=None)


def install_query_counter(engine) -> None:
    """
    Tally every statement *engine* sends while a request is in flight.

    Statements naming ``post_tags`` are counted separately, which makes
    the one-lookup-per-post shape of search visible from outside.
    """

    @event.listens_for(engine.sync_engine, "before_cursor_execute")
    def _tally_statement(conn, cursor, statement, parameters, context, executemany):
        tally = current_tally.get()
        if tally is not None:
            tally.record(statement)


class DiagnosticsMiddleware:
    """
    Adds ``X-Response-Time-Ms``, ``X-Query-Count`` and ``X-Tag-Query-Count``
    to HTTP responses.  Requests slower than *slow_request_ms* are logged
    at WARNING, the rest at DEBUG.

    Pure ASGI so the endpoint shares the request's context and its
    statements land in the tally installed here.
    """

    def __init__(self, app: ASGIApp, slow_request_ms: float | None = None) -> None:
        self.app = app
        self.slow_request_ms = (
            settings.SLOW_REQUEST_MS if slow_request_ms is None else slow_request_ms
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        tally = StatementTally()
        token = current_tally.set(tally)
        start = time.perf_counter()

        async def send_with_diagnostics(message: Message) -> None:
            if message["type"] == "http.response.start":
                elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
                headers = MutableHeaders(scope=message)
                headers.append("x-response-time-ms", str(elapsed_ms))
                headers.append("x-query-count", str(tally.total))
                headers.append("x-tag-query-count", str(tally.tag_statements))
                self._log(scope, message["status"], elapsed_ms, tally)
            await send(message)

        try:
            await self.app(scope, receive, send_with_diagnostics)
        finally:
            current_tally.reset(token)

    def _log(self, scope: Scope, status: int, elapsed_ms: float, tally: StatementTally) -> None:
        level = logging.WARNING if elapsed_ms >= self.slow_request_ms else logging.DEBUG
        logger.log(
            level,
            "%s %s -> %s in %sms (%d statements, %d on %s)",
            scope["method"], scope["path"], status, elapsed_ms,
            tally.total, tally.tag_statements, TAG_TABLE,
        )
