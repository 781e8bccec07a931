"""
Xync Backend — Note SQLAlchemy Model
====================================

What:  ORM model for the `notes` table: free-text documents owned by one
       user. No relations beyond ownership.

Query Patterns:
    - List a user's notes, most recently edited first:
      SELECT ... WHERE user_id = :uid ORDER BY updated_at DESC
      → idx_notes_user_updated
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from xync.database import Base
from xync.models.user import utcnow


class Note(Base):
    __tablename__ = "notes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(String(500), nullable=False)

    # TEXT: no artificial length limit on note bodies
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

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

    __table_args__ = (
        Index("idx_notes_user_updated", "user_id", "updated_at"),
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, updated_at='{self.updated_at}')>"
