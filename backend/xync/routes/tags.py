"""
Xync Backend — Tags Routes
==========================

What:  CRUD over the caller's tags. Names are unique per user (409 on a
       duplicate); deleting a tag detaches it from bookmarks without
       deleting them.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from xync.database import get_db_session
from xync.middleware.auth import get_current_user_id
from xync.schemas.common import ErrorResponse
from xync.schemas.tag import TagCreate, TagResponse, TagUpdate
from xync.services.tag_service import tag_service

router = APIRouter(prefix="/tags", tags=["Tags"])

NOT_FOUND = {404: {"description": "Tag not found", "model": ErrorResponse}}
CONFLICT = {409: {"description": "Tag name already used", "model": ErrorResponse}}


@router.get("", response_model=List[TagResponse], summary="List tags by name")
async def list_tags(
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> List[TagResponse]:
    tags = await tag_service.list_tags(db, user_id)
    return [TagResponse.model_validate(t) for t in tags]


@router.post("", status_code=201, response_model=TagResponse, responses=CONFLICT, summary="Create a tag")
async def create_tag(
    payload: TagCreate,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> TagResponse:
    tag = await tag_service.create_tag(db, user_id, payload)
    return TagResponse.model_validate(tag)


@router.get("/{tag_id}", response_model=TagResponse, responses=NOT_FOUND, summary="Get a tag")
async def get_tag(
    tag_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> TagResponse:
    tag = await tag_service.get_tag(db, user_id, tag_id)
    return TagResponse.model_validate(tag)


@router.put(
    "/{tag_id}",
    response_model=TagResponse,
    responses={**NOT_FOUND, **CONFLICT},
    summary="Rename or recolor a tag",
)
async def update_tag(
    tag_id: UUID,
    payload: TagUpdate,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> TagResponse:
    tag = await tag_service.update_tag(db, user_id, tag_id, payload)
    return TagResponse.model_validate(tag)


@router.delete("/{tag_id}", status_code=204, responses=NOT_FOUND, summary="Delete a tag")
async def delete_tag(
    tag_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await tag_service.delete_tag(db, user_id, tag_id)
    return Response(status_code=204)
