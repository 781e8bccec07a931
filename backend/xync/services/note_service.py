"""
Xync Backend — Note Service
===========================

What:  CRUD for a user's notes. Notes have no relations beyond ownership,
       so every operation is a single-row statement scoped by owner.
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from xync.database import transactional
from xync.models.note import Note
from xync.models.user import utcnow
from xync.schemas.note import NoteCreate, NoteUpdate
from xync.services.ownership import delete_owned, get_owned

logger = logging.getLogger(__name__)


class NoteService:

    @transactional
    async def create_note(self, db: AsyncSession, owner_id: UUID, data: NoteCreate) -> Note:
        note = Note(user_id=owner_id, title=data.title, content=data.content)
        db.add(note)
        await db.flush()
        logger.info("Note created: %s", note.id)
        return note

    @transactional
    async def list_notes(self, db: AsyncSession, owner_id: UUID) -> List[Note]:
        """Most recently edited first."""
        result = await db.execute(
            select(Note)
            .where(Note.user_id == owner_id)
            .order_by(Note.updated_at.desc(), Note.id)
        )
        return list(result.scalars().all())

    @transactional
    async def get_note(self, db: AsyncSession, owner_id: UUID, note_id: UUID) -> Note:
        return await get_owned(db, Note, owner_id, note_id, "note")

    @transactional
    async def update_note(
        self, db: AsyncSession, owner_id: UUID, note_id: UUID, data: NoteUpdate
    ) -> Note:
        note = await get_owned(db, Note, owner_id, note_id, "note", for_update=True)
        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(note, field, value)
        if changes:
            note.updated_at = utcnow()
        await db.flush()
        return note

    @transactional
    async def delete_note(self, db: AsyncSession, owner_id: UUID, note_id: UUID) -> None:
        await delete_owned(db, Note, owner_id, note_id, "note")
        logger.info("Note deleted: %s", note_id)


note_service = NoteService()
