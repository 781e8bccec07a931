"""
Xync Backend — User Service
===========================

What:  Registration, login and account lookup.
How:   Composes the credential store (xync.security) with the users table.
Who:   Called by the /auth routes.

Login Flow:
    ┌──────────┐    ┌──────────────┐    ┌────────────────┐    ┌────────────┐
    │  email   │───▶│ SELECT user  │───▶│ argon2 verify  │───▶│ issue token│
    └──────────┘    │ by email     │    │ (real or dummy │    │ (route)    │
                    └──────────────┘    │  hash)         │    └────────────┘
                                        └────────────────┘

    Unknown email and wrong password both run one argon2 verification and
    both raise InvalidCredentialsError, so neither the response body nor its
    timing tells a caller whether the account exists.

Hashing is CPU-bound (tens of milliseconds per argon2 call) and runs in
Starlette's worker thread pool so it never blocks the event loop.
"""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from xync.config import settings
from xync.database import flush_or_conflict, transactional
from xync.exceptions import InvalidCredentialsError, NotFoundError
from xync.models.user import User
from xync.schemas.auth import RegisterRequest
from xync.security import (
    IssuedToken,
    dummy_password_hash,
    hash_password,
    issue_token,
    verify_password,
)

logger = logging.getLogger(__name__)


def _check_password(password: str, stored_hash: Optional[str]) -> bool:
    # Runs in a worker thread. Unknown accounts are verified against the
    # dummy hash so the cost matches a real check.
    if stored_hash is None:
        verify_password(password, dummy_password_hash())
        return False
    return verify_password(password, stored_hash)


class UserService:
    """
    Responsibilities:
        - register():      create an account (409 on a taken email)
        - find_by_email(): one committed lookup, so no connection is held
                           while the password is verified
        - authenticate():  check credentials, return the user
        - get_user():      load the caller for /auth/me
        - delete_user():   remove an account; the database cascades the delete
                           to every bookmark, note, tag and category it owns
        - issue_session(): sign a token for a user at an explicit time
    """

    @transactional
    async def register(self, db: AsyncSession, data: RegisterRequest) -> User:
        password_hash = await run_in_threadpool(hash_password, data.password)

        user = User(email=data.email, password_hash=password_hash, name=data.name)
        db.add(user)
        await flush_or_conflict(db, "An account with this email already exists")

        logger.info("User registered: %s", user.id)
        return user

    @transactional
    async def find_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def authenticate(self, db: AsyncSession, email: str, password: str) -> User:
        user = await self.find_by_email(db, email)

        stored_hash = user.password_hash if user is not None else None
        valid = await run_in_threadpool(_check_password, password, stored_hash)
        if user is None or not valid:
            logger.info("Login rejected")
            raise InvalidCredentialsError()

        logger.info("User logged in: %s", user.id)
        return user

    @transactional
    async def get_user(self, db: AsyncSession, user_id: UUID) -> User:
        result = await db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFoundError(resource="user")
        return user

    @transactional
    async def delete_user(self, db: AsyncSession, user_id: UUID) -> None:
        # Owned rows are removed by the users.id ON DELETE CASCADE foreign keys
        result = await db.execute(
            delete(User)
            .where(User.id == user_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFoundError(resource="user")
        logger.info("User deleted: %s", user_id)

    def issue_session(self, user: User, now: datetime) -> IssuedToken:
        return issue_token(
            user.id,
            now,
            secret=settings.jwt_secret,
            lifetime_hours=settings.jwt_expiration_hours,
            algorithm=settings.jwt_algorithm,
        )


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
