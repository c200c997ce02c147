"""
Table definitions as PostgreSQL would receive them.

SQLite ignores VARCHAR lengths and has a single integer type, so column
limits are checked on the compiled DDL instead of through inserts.
"""
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.schema import CreateTable

from blogging.models import PostRecord, PostTagRecord


def _ddl(record, dialect) -> str:
    return str(CreateTable(record.__table__).compile(dialect=dialect))


def test_post_text_columns_have_no_length_limit():
    ddl = _ddl(PostRecord, postgresql.dialect())
    for column in ("title", "content", "category"):
        assert f"{column} TEXT NOT NULL" in ddl
    assert "VARCHAR" not in ddl


def test_tag_name_has_no_length_limit():
    ddl = _ddl(PostTagRecord, postgresql.dialect())
    assert "tag_name TEXT NOT NULL" in ddl
    assert "VARCHAR" not in ddl


def test_ids_are_64_bit_on_postgresql():
    assert "id BIGSERIAL NOT NULL" in _ddl(PostRecord, postgresql.dialect())
    assert "post_id BIGINT NOT NULL" in _ddl(PostTagRecord, postgresql.dialect())


def test_ids_stay_autoincrementing_integers_on_sqlite():
    assert "id INTEGER NOT NULL" in _ddl(PostRecord, sqlite.dialect())
