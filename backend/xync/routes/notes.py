"""
Xync Backend — Notes Routes
===========================

What:  CRUD over the caller's notes.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from xync.database import get_db_session
from xync.middleware.auth import get_current_user_id
from xync.schemas.common import ErrorResponse
from xync.schemas.note import NoteCreate, NoteResponse, NoteUpdate
from xync.services.note_service import note_service

router = APIRouter(prefix="/notes", tags=["Notes"])

NOT_FOUND = {404: {"description": "Note not found", "model": ErrorResponse}}


@router.get("", response_model=List[NoteResponse], summary="List notes, most recently edited first")
async def list_notes(
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> List[NoteResponse]:
    notes = await note_service.list_notes(db, user_id)
    return [NoteResponse.model_validate(n) for n in notes]


@router.post("", status_code=201, response_model=NoteResponse, summary="Create a note")
async def create_note(
    payload: NoteCreate,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> NoteResponse:
    note = await note_service.create_note(db, user_id, payload)
    return NoteResponse.model_validate(note)


@router.get("/{note_id}", response_model=NoteResponse, responses=NOT_FOUND, summary="Get a note")
async def get_note(
    note_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> NoteResponse:
    note = await note_service.get_note(db, user_id, note_id)
    return NoteResponse.model_validate(note)


@router.put("/{note_id}", response_model=NoteResponse, responses=NOT_FOUND, summary="Update a note")
async def update_note(
    note_id: UUID,
    payload: NoteUpdate,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> NoteResponse:
    note = await note_service.update_note(db, user_id, note_id, payload)
    return NoteResponse.model_validate(note)


@router.delete("/{note_id}", status_code=204, responses=NOT_FOUND, summary="Delete a note")
async def delete_note(
    note_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await note_service.delete_note(db, user_id, note_id)
    return Response(status_code=204)
