"""
Xync Backend — Category SQLAlchemy Model
========================================

What:  ORM model for the `categories` table: user-owned, optionally nested
       folders for bookmarks.
How:   A nullable self-referencing `parent_id`.

Deletion Rules (enforced by the foreign keys, not by application code):
    - owner deleted      → category deleted            (user_id ON DELETE CASCADE)
    - parent deleted     → child moves to the root     (parent_id ON DELETE SET NULL)
    - category deleted   → bookmarks become uncategorized
                           (bookmarks.category_id ON DELETE SET NULL, see bookmark.py)

Categories detach, users cascade. The two behaviours are intentionally
different and must not be unified.

Invariants the storage cannot express alone (checked by CategoryService):
    - parent belongs to the same owner
    - the parent chain never loops back to the category itself
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from xync.database import Base
from xync.models.user import utcnow


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Unique per owner, not globally (see __table_args__)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    parent_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        comment="Parent category of the same owner; NULL for root categories",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    # ── Constraints & Indexes ─────────────────────────────────────────────
    # Duplicate (user_id, name) pairs surface as IntegrityError → 409.
    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_categories_user_name"),
        Index("idx_categories_user_id", "user_id"),
        Index("idx_categories_parent_id", "parent_id"),
    )

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, parent_id={self.parent_id})>"
