"""
Xync Backend — Bookmark SQLAlchemy Model
========================================

What:  ORM model for the `bookmarks` table and the `bookmark_tags`
       many-to-many association table.
Who:   Used by BookmarkService; read by Alembic for migrations.

Table Design:
    - category_id: optional, same owner (checked by BookmarkService),
      ON DELETE SET NULL so deleting a category uncategorizes its bookmarks
    - preview_image / preview_description / favicon: cached output of the
      preview fetch; NULL when never fetched or when the fetch failed
    - updated_at: set explicitly by the service on every update

bookmark_tags:
    Composite primary key (bookmark_id, tag_id), so a tag is attached to a
    bookmark at most once. Both foreign keys cascade: deleting a bookmark or
    a tag removes the association rows and nothing else.

Query Patterns:
    - List a user's bookmarks, newest first:
      SELECT ... WHERE user_id = :uid ORDER BY created_at DESC
      → idx_bookmarks_user_created
    - Tags for a page of bookmarks: one SELECT ... IN (...) via selectinload
    - Tag delete cascade looks up associations by tag_id → idx_bookmark_tags_tag_id
"""

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Table,
    Text,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from xync.database import Base
from xync.models.tag import Tag
from xync.models.user import utcnow


# ── Association Table ─────────────────────────────────────────────────────
bookmark_tags = Table(
    "bookmark_tags",
    Base.metadata,
    Column(
        "bookmark_id",
        Uuid,
        ForeignKey("bookmarks.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "tag_id",
        Uuid,
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Index("idx_bookmark_tags_tag_id", "tag_id"),
)


class Bookmark(Base):
    """A saved link owned by one user."""

    __tablename__ = "bookmarks"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    url: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    category_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
    )

    # ── Cached Preview ────────────────────────────────────────────────────
    preview_image: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    preview_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    favicon: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ── Timestamps ────────────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    # passive_deletes: the database removes association rows on delete;
    # the ORM must not try to do it first.
    tags: Mapped[List[Tag]] = relationship(
        Tag,
        secondary=bookmark_tags,
        lazy="selectin",
        passive_deletes=True,
        order_by=Tag.name,
    )

    __table_args__ = (
        Index("idx_bookmarks_user_created", "user_id", "created_at"),
        Index("idx_bookmarks_category_id", "category_id"),
    )

    def __repr__(self) -> str:
        return f"<Bookmark(id={self.id}, category_id={self.category_id})>"
