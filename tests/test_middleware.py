"""
Diagnostics middleware driven directly with a bare ASGI app.
"""
import logging

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import text

from blogging.middleware import DiagnosticsMiddleware, StatementTally, current_tally

from conftest import engine_test


def _endpoint(statements=()):
    async def app(scope, receive, send):
        async with engine_test.connect() as conn:
            for statement in statements:
                await conn.execute(text(statement))
        await send({"type": "http.response.start", "status": 200, "headers": []})
        await send({"type": "http.response.body", "body": b"ok"})

    return app


async def _get(app, path="/anything"):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        return await client.get(path)


def test_tally_separates_tag_statements():
    tally = StatementTally()
    tally.record("SELECT posts.id FROM posts")
    tally.record("SELECT post_tags.tag_name FROM post_tags WHERE post_tags.post_id = ?")
    assert (tally.total, tally.tag_statements) == (2, 1)


@pytest.mark.asyncio
async def test_headers_report_statements_of_this_request():
    app = DiagnosticsMiddleware(
        _endpoint(["SELECT count(*) FROM posts", "SELECT count(*) FROM post_tags"]),
        slow_request_ms=10_000,
    )

    resp = await _get(app)

    assert resp.headers["x-query-count"] == "2"
    assert resp.headers["x-tag-query-count"] == "1"
    assert float(resp.headers["x-response-time-ms"]) >= 0


@pytest.mark.asyncio
async def test_tally_is_cleared_after_the_request():
    app = DiagnosticsMiddleware(_endpoint(["SELECT 1"]), slow_request_ms=10_000)
    await _get(app)
    assert current_tally.get() is None


@pytest.mark.asyncio
async def test_slow_request_is_logged_at_warning(caplog):
    app = DiagnosticsMiddleware(_endpoint(), slow_request_ms=0)

    with caplog.at_level(logging.DEBUG, logger="blogging.middleware"):
        await _get(app, "/api/posts")

    records = [r for r in caplog.records if r.name == "blogging.middleware"]
    assert [r.levelno for r in records] == [logging.WARNING]
    assert "GET /api/posts -> 200" in records[0].getMessage()


@pytest.mark.asyncio
async def test_fast_request_is_logged_at_debug(caplog):
    app = DiagnosticsMiddleware(_endpoint(), slow_request_ms=10_000)

    with caplog.at_level(logging.DEBUG, logger="blogging.middleware"):
        await _get(app)

    records = [r for r in caplog.records if r.name == "blogging.middleware"]
    assert [r.levelno for r in records] == [logging.DEBUG]
