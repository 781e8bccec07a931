"""
Xync Backend — User SQLAlchemy Model
====================================

What:  ORM model for the `users` table, the identity anchor every other row
       points at through `user_id`.

Table Design:
    - UUID primary key generated by the application
    - email: UNIQUE at the storage level; the service lower-cases and trims it
      before every insert and lookup, so uniqueness is case-insensitive
    - password_hash: argon2 string (algorithm, parameters and salt embedded)
    - Every owned table references users.id with ON DELETE CASCADE, so removing
      a user row removes the whole collection inside the database
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from xync.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """A registered account. Never hard-deleted through the API."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Normalized (trimmed, lower-case) login email",
    )

    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

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

    def __repr__(self) -> str:
        return f"<User(id={self.id})>"
