"""
Xync Backend — Bookmark Service
===============================

What:  CRUD for a user's bookmarks and their tag associations.
Who:   Called by the /bookmarks routes.

Atomicity:
    A bookmark row and its bookmark_tags rows are written in the same
    transaction (see `transactional`). If any referenced tag or category is
    rejected, nothing is written.

Reference Checks:
    category_id → must be one of the caller's categories
    tag_ids     → every id must be one of the caller's tags
    Both fail with ValidationError (400) and the same message whether the id
    does not exist or belongs to another user. Checked rows stay locked until
    commit (category FOR UPDATE, tags FOR SHARE). On engines without row
    locks, a reference deleted between check and flush is also a 400.

Preview:
    The preview fetch is network I/O and runs in the route, before the
    transaction starts. This service only stores the result.
"""

import logging
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from xync.database import flush_or_conflict, transactional
from xync.exceptions import ValidationError
from xync.models.bookmark import Bookmark
from xync.models.tag import Tag
from xync.models.user import utcnow
from xync.schemas.bookmark import BookmarkCreate, BookmarkPreview, BookmarkUpdate
from xync.services.category_service import require_owned_category
from xync.services.ownership import delete_owned, get_owned

logger = logging.getLogger(__name__)


async def _owned_tags(db: AsyncSession, owner_id: UUID, tag_ids: Sequence[UUID]) -> List[Tag]:
    if not tag_ids:
        return []
    result = await db.execute(
        select(Tag)
        .where(Tag.id.in_(tag_ids), Tag.user_id == owner_id)
        # FOR SHARE: a concurrent tag delete waits until this transaction ends
        .with_for_update(read=True)
    )
    tags = list(result.scalars().all())
    if len(tags) != len(set(tag_ids)):
        raise ValidationError(message="One or more tags not found", field="tag_ids")
    return tags


class BookmarkService:
    """
    Responsibilities:
        - create_bookmark(): insert bookmark + tag associations, optionally
          with cached preview fields
        - list_bookmarks():  newest first, tags included
        - get_bookmark() / update_bookmark() / delete_bookmark()
    """

    @transactional
    async def create_bookmark(
        self,
        db: AsyncSession,
        owner_id: UUID,
        data: BookmarkCreate,
        preview: Optional[BookmarkPreview] = None,
    ) -> Bookmark:
        if data.category_id is not None:
            await require_owned_category(db, owner_id, data.category_id, "category_id")
        tags = await _owned_tags(db, owner_id, data.tag_ids)

        bookmark = Bookmark(
            user_id=owner_id,
            url=data.url,
            title=data.title,
            description=data.description,
            category_id=data.category_id,
        )
        if preview is not None:
            bookmark.preview_image = preview.image
            bookmark.preview_description = preview.description
            bookmark.favicon = preview.favicon
        bookmark.tags = tags

        db.add(bookmark)
        await flush_or_conflict(db)
        logger.info("Bookmark created: %s (%d tags)", bookmark.id, len(tags))
        return bookmark

    @transactional
    async def list_bookmarks(
        self,
        db: AsyncSession,
        owner_id: UUID,
        category_id: Optional[UUID] = None,
    ) -> List[Bookmark]:
        stmt = (
            select(Bookmark)
            .where(Bookmark.user_id == owner_id)
            .order_by(Bookmark.created_at.desc(), Bookmark.id)
        )
        if category_id is not None:
            stmt = stmt.where(Bookmark.category_id == category_id)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @transactional
    async def get_bookmark(
        self, db: AsyncSession, owner_id: UUID, bookmark_id: UUID
    ) -> Bookmark:
        return await get_owned(db, Bookmark, owner_id, bookmark_id, "bookmark")

    @transactional
    async def update_bookmark(
        self,
        db: AsyncSession,
        owner_id: UUID,
        bookmark_id: UUID,
        data: BookmarkUpdate,
    ) -> Bookmark:
        bookmark = await get_owned(
            db,
            Bookmark,
            owner_id,
            bookmark_id,
            "bookmark",
            for_update=True,
        )
        changes = data.model_dump(exclude_unset=True)
        tag_ids = changes.pop("tag_ids", None)

        if changes.get("category_id") is not None:
            await require_owned_category(db, owner_id, changes["category_id"], "category_id")
        if tag_ids is not None:
            # Replaces the whole set; the ORM diffs old vs new association rows
            bookmark.tags = await _owned_tags(db, owner_id, tag_ids)

        for field, value in changes.items():
            setattr(bookmark, field, value)
        bookmark.updated_at = utcnow()

        await flush_or_conflict(db)
        return bookmark

    @transactional
    async def delete_bookmark(
        self, db: AsyncSession, owner_id: UUID, bookmark_id: UUID
    ) -> None:
        await delete_owned(db, Bookmark, owner_id, bookmark_id, "bookmark")
        logger.info("Bookmark deleted: %s", bookmark_id)


bookmark_service = BookmarkService()
