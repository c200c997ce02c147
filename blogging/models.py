from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from blogging.database import Base

# 64-bit ids.  SQLite only autoincrements a column declared INTEGER.
PostIdType = BigInteger().with_variant(Integer, "sqlite")

MAX_POST_ID = 2**63 - 1

# ---------------------------------------------------------------------------
# Post
# ---------------------------------------------------------------------------
class PostRecord(Base):
    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(PostIdType, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


# ---------------------------------------------------------------------------
# Post tags
# ---------------------------------------------------------------------------
class PostTagRecord(Base):
    __tablename__ = "post_tags"

    __table_args__ = (
        # Tag lookups are always "all tags of one post, in insertion order".
        Index("ix_post_tags_post_id_id", "post_id", "id"),
    )

    # Surrogate key; its ordering is the tag insertion order.
    id: Mapped[int] = mapped_column(PostIdType, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        PostIdType, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False
    )
    tag_name: Mapped[str] = mapped_column(Text, nullable=False)
