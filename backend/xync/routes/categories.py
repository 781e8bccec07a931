"""
Xync Backend — Categories Routes
================================

What:  CRUD over the caller's category tree.

Status codes specific to categories:
    400: parent is missing, belongs to another user, is the category itself,
         or is one of its descendants (the category is left unchanged)
    409: another category of this user already has the name
    204: on delete; children move to the root, bookmarks become uncategorized
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from xync.database import get_db_session
from xync.middleware.auth import get_current_user_id
from xync.schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate
from xync.schemas.common import ErrorResponse
from xync.services.category_service import category_service

router = APIRouter(prefix="/categories", tags=["Categories"])

NOT_FOUND = {404: {"description": "Category not found", "model": ErrorResponse}}
INVALID_PARENT = {400: {"description": "Invalid parent category", "model": ErrorResponse}}
CONFLICT = {409: {"description": "Category name already used", "model": ErrorResponse}}


@router.get("", response_model=List[CategoryResponse], summary="List categories by name")
async def list_categories(
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> List[CategoryResponse]:
    categories = await category_service.list_categories(db, user_id)
    return [CategoryResponse.model_validate(c) for c in categories]


@router.post(
    "",
    status_code=201,
    response_model=CategoryResponse,
    responses={**INVALID_PARENT, **CONFLICT},
    summary="Create a category",
)
async def create_category(
    payload: CategoryCreate,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> CategoryResponse:
    category = await category_service.create_category(db, user_id, payload)
    return CategoryResponse.model_validate(category)


@router.get("/{category_id}", response_model=CategoryResponse, responses=NOT_FOUND, summary="Get a category")
async def get_category(
    category_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> CategoryResponse:
    category = await category_service.get_category(db, user_id, category_id)
    return CategoryResponse.model_validate(category)


@router.put(
    "/{category_id}",
    response_model=CategoryResponse,
    responses={**NOT_FOUND, **INVALID_PARENT, **CONFLICT},
    summary="Rename, describe or reparent a category",
    description="Send `parent_id: null` to move the category to the root.",
)
async def update_category(
    category_id: UUID,
    payload: CategoryUpdate,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> CategoryResponse:
    category = await category_service.update_category(db, user_id, category_id, payload)
    return CategoryResponse.model_validate(category)


@router.delete("/{category_id}", status_code=204, responses=NOT_FOUND, summary="Delete a category")
async def delete_category(
    category_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await category_service.delete_category(db, user_id, category_id)
    return Response(status_code=204)
