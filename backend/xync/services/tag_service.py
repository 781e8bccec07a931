"""
Xync Backend — Tag Service
==========================

What:  CRUD for a user's tags.

Deleting a tag removes its bookmark_tags rows through the foreign key
cascade; bookmarks that carried the tag are left in place.
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from xync.database import flush_or_conflict, transactional
from xync.models.tag import Tag
from xync.schemas.tag import TagCreate, TagUpdate
from xync.services.ownership import delete_owned, get_owned

logger = logging.getLogger(__name__)

DUPLICATE_TAG = "A tag with this name already exists"


class TagService:

    @transactional
    async def create_tag(self, db: AsyncSession, owner_id: UUID, data: TagCreate) -> Tag:
        tag = Tag(user_id=owner_id, name=data.name, color=data.color)
        db.add(tag)
        await flush_or_conflict(db, DUPLICATE_TAG)
        logger.info("Tag created: %s", tag.id)
        return tag

    @transactional
    async def list_tags(self, db: AsyncSession, owner_id: UUID) -> List[Tag]:
        result = await db.execute(
            select(Tag).where(Tag.user_id == owner_id).order_by(Tag.name)
        )
        return list(result.scalars().all())

    @transactional
    async def get_tag(self, db: AsyncSession, owner_id: UUID, tag_id: UUID) -> Tag:
        return await get_owned(db, Tag, owner_id, tag_id, "tag")

    @transactional
    async def update_tag(
        self, db: AsyncSession, owner_id: UUID, tag_id: UUID, data: TagUpdate
    ) -> Tag:
        tag = await get_owned(db, Tag, owner_id, tag_id, "tag", for_update=True)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(tag, field, value)
        await flush_or_conflict(db, DUPLICATE_TAG)
        return tag

    @transactional
    async def delete_tag(self, db: AsyncSession, owner_id: UUID, tag_id: UUID) -> None:
        await delete_owned(db, Tag, owner_id, tag_id, "tag")
        logger.info("Tag deleted: %s", tag_id)


tag_service = TagService()
