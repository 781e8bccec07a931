"""
Xync Backend — Category Service
===============================

What:  CRUD for a user's categories, plus the hierarchy rules.
Who:   Called by the /categories routes; BookmarkService reuses
       `require_owned_category()` to validate `category_id`.

Hierarchy Rules:
    1. A parent must be one of the caller's own categories. A missing id
       and another user's id are rejected identically (400), so the
       response never reveals that someone else's category exists.
    2. Reparenting must not create a cycle. The check walks the ancestor
       chain of the proposed parent, inside the same transaction as the
       UPDATE, locking each visited row (SELECT ... FOR UPDATE on
       PostgreSQL). Two concurrent reparentings that would together form a
       loop therefore serialize or deadlock; the deadlock victim is retried
       by `transactional` and then sees the committed state.

       Example: Work ← Projects ← Q3   (arrows point at the parent)
           update Work.parent_id = Q3
           walk: Q3 → Projects → Work   ← reached the category itself → 400

    3. Deleting a category never deletes anything else: child categories
       become roots and bookmarks become uncategorized (ON DELETE SET NULL).

A rejected update leaves the category unchanged: the error is raised before
any attribute is assigned, and the transaction is rolled back regardless.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from xync.database import flush_or_conflict, transactional
from xync.exceptions import ValidationError
from xync.models.category import Category
from xync.schemas.category import CategoryCreate, CategoryUpdate
from xync.services.ownership import delete_owned, get_owned

logger = logging.getLogger(__name__)

DUPLICATE_CATEGORY = "A category with this name already exists"


async def require_owned_category(
    db: AsyncSession,
    owner_id: UUID,
    category_id: UUID,
    field: str,
) -> Optional[UUID]:
    """
    Return the parent id of `category_id` if the caller owns it.

    Raises:
        ValidationError: missing, or owned by another user
    """
    result = await db.execute(
        select(Category.id, Category.parent_id)
        .where(Category.id == category_id, Category.user_id == owner_id)
        .with_for_update()
    )
    row = result.one_or_none()
    if row is None:
        raise ValidationError(message="Category not found", field=field)
    return row.parent_id


class CategoryService:

    @transactional
    async def create_category(
        self, db: AsyncSession, owner_id: UUID, data: CategoryCreate
    ) -> Category:
        if data.parent_id is not None:
            await require_owned_category(db, owner_id, data.parent_id, "parent_id")

        category = Category(
            user_id=owner_id,
            name=data.name,
            description=data.description,
            parent_id=data.parent_id,
        )
        db.add(category)
        await flush_or_conflict(db, DUPLICATE_CATEGORY, reference_field="parent_id")
        logger.info("Category created: %s", category.id)
        return category

    @transactional
    async def list_categories(self, db: AsyncSession, owner_id: UUID) -> List[Category]:
        result = await db.execute(
            select(Category)
            .where(Category.user_id == owner_id)
            .order_by(Category.name)
        )
        return list(result.scalars().all())

    @transactional
    async def get_category(
        self, db: AsyncSession, owner_id: UUID, category_id: UUID
    ) -> Category:
        return await get_owned(db, Category, owner_id, category_id, "category")

    @transactional
    async def update_category(
        self,
        db: AsyncSession,
        owner_id: UUID,
        category_id: UUID,
        data: CategoryUpdate,
    ) -> Category:
        category = await get_owned(
            db, Category, owner_id, category_id, "category", for_update=True
        )
        changes = data.model_dump(exclude_unset=True)

        new_parent = changes.get("parent_id")
        if new_parent is not None and new_parent != category.parent_id:
            await self._check_parent(db, owner_id, category.id, new_parent)

        for field, value in changes.items():
            setattr(category, field, value)
        await flush_or_conflict(db, DUPLICATE_CATEGORY, reference_field="parent_id")
        return category

    @transactional
    async def delete_category(
        self, db: AsyncSession, owner_id: UUID, category_id: UUID
    ) -> None:
        await delete_owned(db, Category, owner_id, category_id, "category")
        logger.info("Category deleted: %s", category_id)

    async def _check_parent(
        self,
        db: AsyncSession,
        owner_id: UUID,
        category_id: UUID,
        parent_id: UUID,
    ) -> None:
        """
        Reject `parent_id` for `category_id` if it is foreign, missing, the
        category itself, or one of its descendants.
        """
        if parent_id == category_id:
            raise ValidationError(
                message="A category cannot be its own parent", field="parent_id"
            )

        current: Optional[UUID] = parent_id
        visited = {category_id}
        while current is not None:
            next_parent = await require_owned_category(db, owner_id, current, "parent_id")
            if next_parent in visited:
                logger.info("Rejected cyclic reparenting of category %s", category_id)
                raise ValidationError(
                    message="Parent assignment would create a cycle", field="parent_id"
                )
            visited.add(current)
            current = next_parent


category_service = CategoryService()
