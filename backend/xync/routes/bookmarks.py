"""
Xync Backend — Bookmarks Routes
===============================

What:  CRUD over the caller's bookmarks and the preview endpoint.

Request Flow (POST /bookmarks with fetch_preview=true):
    1. Fetch the page preview (network, outside any transaction, never fails)
    2. BookmarkService validates category/tags and inserts bookmark + tag
       associations in one transaction
    3. 201 with the bookmark and its tags

Route order matters: /bookmarks/preview is declared before /bookmarks/{id}
so "preview" is never parsed as an id.
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from xync.database import get_db_session
from xync.middleware.auth import get_current_user_id
from xync.schemas.bookmark import (
    BookmarkCreate,
    BookmarkPreview,
    BookmarkResponse,
    BookmarkUpdate,
    PreviewRequest,
)
from xync.schemas.common import ErrorResponse
from xync.services.bookmark_service import bookmark_service
from xync.services.preview_service import preview_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookmarks", tags=["Bookmarks"])

NOT_FOUND = {404: {"description": "Bookmark not found", "model": ErrorResponse}}
BAD_REFERENCE = {400: {"description": "Unknown category or tag", "model": ErrorResponse}}


@router.get("", response_model=List[BookmarkResponse], summary="List bookmarks, newest first")
async def list_bookmarks(
    category_id: Optional[UUID] = Query(default=None, description="Only bookmarks in this category"),
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> List[BookmarkResponse]:
    bookmarks = await bookmark_service.list_bookmarks(db, user_id, category_id=category_id)
    return [BookmarkResponse.model_validate(b) for b in bookmarks]


@router.post(
    "",
    status_code=201,
    response_model=BookmarkResponse,
    responses=BAD_REFERENCE,
    summary="Save a bookmark",
)
async def create_bookmark(
    payload: BookmarkCreate,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> BookmarkResponse:
    preview: Optional[BookmarkPreview] = None
    if payload.fetch_preview:
        preview = await preview_service.fetch_preview(payload.url)

    bookmark = await bookmark_service.create_bookmark(db, user_id, payload, preview=preview)
    return BookmarkResponse.model_validate(bookmark)


@router.post(
    "/preview",
    response_model=BookmarkPreview,
    summary="Fetch page metadata for a URL",
    description=(
        "Returns title, description, preview image and favicon scraped from the "
        "page. Fields the page does not provide, or that could not be fetched, "
        "are null. Nothing is stored."
    ),
)
async def preview_bookmark(
    payload: PreviewRequest,
    user_id: UUID = Depends(get_current_user_id),
) -> BookmarkPreview:
    return await preview_service.fetch_preview(payload.url)


@router.get("/{bookmark_id}", response_model=BookmarkResponse, responses=NOT_FOUND, summary="Get a bookmark")
async def get_bookmark(
    bookmark_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> BookmarkResponse:
    bookmark = await bookmark_service.get_bookmark(db, user_id, bookmark_id)
    return BookmarkResponse.model_validate(bookmark)


@router.put(
    "/{bookmark_id}",
    response_model=BookmarkResponse,
    responses={**NOT_FOUND, **BAD_REFERENCE},
    summary="Update a bookmark",
    description=(
        "Partial update. `tag_ids` replaces the full tag set when present; "
        "`category_id: null` uncategorizes the bookmark."
    ),
)
async def update_bookmark(
    bookmark_id: UUID,
    payload: BookmarkUpdate,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> BookmarkResponse:
    bookmark = await bookmark_service.update_bookmark(db, user_id, bookmark_id, payload)
    return BookmarkResponse.model_validate(bookmark)


@router.delete("/{bookmark_id}", status_code=204, responses=NOT_FOUND, summary="Delete a bookmark")
async def delete_bookmark(
    bookmark_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await bookmark_service.delete_bookmark(db, user_id, bookmark_id)
    return Response(status_code=204)
