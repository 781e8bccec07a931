"""
Xync Backend — Tag SQLAlchemy Model
===================================

What:  User-owned labels attached to bookmarks through `bookmark_tags`.

Deleting a tag removes its association rows (bookmark_tags.tag_id ON DELETE
CASCADE) and leaves the bookmarks themselves untouched.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from xync.database import Base
from xync.models.user import utcnow


class Tag(Base):
    __tablename__ = "tags"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)

    # Display color as #rrggbb (format validated by the request schema)
    color: Mapped[Optional[str]] = mapped_column(String(7), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_tags_user_name"),
        Index("idx_tags_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<Tag(id={self.id})>"
