"""
Blog API — BlogPost SQLAlchemy Model
====================================

What:  ORM model for the `blog_posts` table plus the projection that turns a
       stored record into its public wire representation.
Who:   Used by PostService for every storage call and by Alembic.

Table Design:
    - id:      UUID assigned on insert, never updated
    - title:   TEXT NOT NULL
    - content: TEXT NOT NULL
    - author:  JSON array of {"firstName": ..., "lastName": ...}
               (JSONB on PostgreSQL)
    - created: UTC timestamp, defaults to insertion time
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy import JSON, DateTime, Index, Text, TypeDecorator, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from blog_api.database import Base
from blog_api.schemas.blog_post import BlogPostResponse


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware DateTime that always round-trips as UTC.

    PostgreSQL keeps the offset itself; SQLite stores the bare wall-clock
    value and hands back a naive datetime. Values are normalized to UTC on
    the way in and naive values are tagged as UTC on the way out, so a post
    reads back with the same `created` it was inserted with.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class BlogPost(Base):
    """
    A single persisted blog post.

    Lifecycle:
        1. Inserted by POST /posts (id and created filled in by column defaults)
        2. title/content/author overwritten by PUT /posts/{id}
        3. Removed by DELETE /posts/{id}; no soft delete, no history
    """

    __tablename__ = "blog_posts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(Text, nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    # Stored exactly as it goes over the wire (camelCase keys).
    author: Mapped[List[Dict[str, Any]]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
        default=list,
    )

    created: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # GET /posts returns records in insertion order.
    __table_args__ = (
        Index("idx_blog_posts_created", "created"),
    )

    @property
    def author_string(self) -> str:
        """Human-readable author line, e.g. "Ada Lovelace, Alan Turing"."""
        names = (
            f"{entry.get('firstName', '')} {entry.get('lastName', '')}".strip()
            for entry in (self.author or [])
        )
        return ", ".join(name for name in names if name)

    def __repr__(self) -> str:
        return f"<BlogPost(id={self.id}, title={self.title!r}, author={self.author_string!r})>"


def project(record: BlogPost) -> BlogPostResponse:
    """
    Narrow a stored record to its public representation.

    Pure: reads the record, never touches the session. Internal-only
    columns added to the table later stay out of the response unless they
    are listed here.
    """
    return BlogPostResponse(
        id=record.id,
        title=record.title,
        content=record.content,
        author=record.author or [],
        created=record.created,
    )
