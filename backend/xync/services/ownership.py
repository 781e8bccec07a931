"""
Xync Backend — Owner-Scoped Query Helpers
=========================================

What:  The two lookups every resource service shares: fetch one row the
       caller owns, and delete one row the caller owns.
How:   Both filter on `id` AND `user_id` in the same statement. A row that
       exists under another owner is indistinguishable from a missing row:
       both raise NotFoundError with the same message.

The owner id is always an explicit argument. Nothing here reads it from the
request or from any ambient state.
"""

import uuid
from typing import Type, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from xync.exceptions import NotFoundError

M = TypeVar("M")


async def get_owned(
    db: AsyncSession,
    model: Type[M],
    owner_id: uuid.UUID,
    resource_id: uuid.UUID,
    resource: str,
    *,
    for_update: bool = False,
) -> M:
    """
    SELECT ... WHERE id = :resource_id AND user_id = :owner_id

    Raises:
        NotFoundError: no such row for this owner
    """
    stmt = select(model).where(model.id == resource_id, model.user_id == owner_id)
    if for_update:
        stmt = stmt.with_for_update()

    result = await db.execute(stmt)
    row = result.scalar_one_or_none()
    if row is None:
        raise NotFoundError(resource=resource)
    return row


async def delete_owned(
    db: AsyncSession,
    model: Type[M],
    owner_id: uuid.UUID,
    resource_id: uuid.UUID,
    resource: str,
) -> None:
    """
    DELETE ... WHERE id = :resource_id AND user_id = :owner_id

    Dependent rows are handled by the foreign keys' ON DELETE rules.

    Raises:
        NotFoundError: nothing was deleted
    """
    result = await db.execute(
        delete(model)
        .where(model.id == resource_id, model.user_id == owner_id)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFoundError(resource=resource)
