"""Initial schema: users, categories, tags, bookmarks, bookmark_tags, notes

Revision ID: 001
Revises: None
Create Date: 2024-01-01 00:00:00.000000+00:00

Ownership and deletion rules live in the foreign keys:
    users.id            ← every owned table     ON DELETE CASCADE
    categories.id       ← categories.parent_id  ON DELETE SET NULL
    categories.id       ← bookmarks.category_id ON DELETE SET NULL
    bookmarks.id, tags.id ← bookmark_tags       ON DELETE CASCADE

Per-owner name uniqueness for tags and categories is a composite UNIQUE
constraint, so concurrent duplicate inserts fail in the database.

Rollback: downgrade() drops every table and all data with it.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def _owner() -> sa.Column:
    return sa.Column(
        "user_id",
        sa.Uuid(),
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "email",
            sa.String(255),
            nullable=False,
            comment="Normalized (trimmed, lower-case) login email",
        ),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "categories",
        sa.Column("id", sa.Uuid(), nullable=False),
        _owner(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "parent_id",
            sa.Uuid(),
            sa.ForeignKey("categories.id", ondelete="SET NULL"),
            nullable=True,
            comment="Parent category of the same owner; NULL for root categories",
        ),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "name", name="uq_categories_user_name"),
    )
    op.create_index("idx_categories_user_id", "categories", ["user_id"])
    op.create_index("idx_categories_parent_id", "categories", ["parent_id"])

    op.create_table(
        "tags",
        sa.Column("id", sa.Uuid(), nullable=False),
        _owner(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("color", sa.String(7), nullable=True),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "name", name="uq_tags_user_name"),
    )
    op.create_index("idx_tags_user_id", "tags", ["user_id"])

    op.create_table(
        "bookmarks",
        sa.Column("id", sa.Uuid(), nullable=False),
        _owner(),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "category_id",
            sa.Uuid(),
            sa.ForeignKey("categories.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("preview_image", sa.Text(), nullable=True),
        sa.Column("preview_description", sa.Text(), nullable=True),
        sa.Column("favicon", sa.Text(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_bookmarks_user_created", "bookmarks", ["user_id", "created_at"])
    op.create_index("idx_bookmarks_category_id", "bookmarks", ["category_id"])

    op.create_table(
        "bookmark_tags",
        sa.Column(
            "bookmark_id",
            sa.Uuid(),
            sa.ForeignKey("bookmarks.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "tag_id",
            sa.Uuid(),
            sa.ForeignKey("tags.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("bookmark_id", "tag_id"),
    )
    op.create_index("idx_bookmark_tags_tag_id", "bookmark_tags", ["tag_id"])

    op.create_table(
        "notes",
        sa.Column("id", sa.Uuid(), nullable=False),
        _owner(),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("content", sa.Text(), nullable=False, server_default=sa.text("''")),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_notes_user_updated", "notes", ["user_id", "updated_at"])


def downgrade() -> None:
    op.drop_index("idx_notes_user_updated", table_name="notes")
    op.drop_table("notes")
    op.drop_index("idx_bookmark_tags_tag_id", table_name="bookmark_tags")
    op.drop_table("bookmark_tags")
    op.drop_index("idx_bookmarks_category_id", table_name="bookmarks")
    op.drop_index("idx_bookmarks_user_created", table_name="bookmarks")
    op.drop_table("bookmarks")
    op.drop_index("idx_tags_user_id", table_name="tags")
    op.drop_table("tags")
    op.drop_index("idx_categories_parent_id", table_name="categories")
    op.drop_index("idx_categories_user_id", table_name="categories")
    op.drop_table("categories")
    op.drop_table("users")
