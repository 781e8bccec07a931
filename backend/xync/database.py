"""
Xync Backend — Database Session Management
==========================================

What:  Async SQLAlchemy engine, session factory, declarative base, the FastAPI
       session dependency and the `transactional` unit-of-work decorator.
How:   One engine with a bounded connection pool. Each request gets its own
       session; each data-layer operation runs as one transaction that is
       committed on success, rolled back on failure and retried once when
       the failure is transient.
Who:   Engine/session used by routes via Depends(); `transactional` wraps
       every public service method.

Connection Pooling Strategy:
    pool_size=20:       Persistent connections for normal load
    max_overflow=10:    Temporary connections for traffic spikes (total max = 30)
    pool_timeout=10s:   Bounded wait for a free connection (surfaces as 503)
    pool_pre_ping:      Validates connections before use
    command_timeout:    asyncpg per-statement bound (PostgreSQL only)

SQLite (tests, local experiments) gets no pool sizing and has
`PRAGMA foreign_keys=ON` set on every connection, otherwise the ON DELETE
CASCADE / SET NULL rules of the schema would be ignored.
"""

import asyncio
import functools
import logging
from typing import Any, AsyncGenerator, Awaitable, Callable, Optional, TypeVar

from sqlalchemy import event
from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_fixed,
)

from xync.config import settings
from xync.exceptions import (
    ConflictError,
    DatabaseError,
    StorageUnavailableError,
    ValidationError,
    XyncError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# SQLSTATE codes PostgreSQL uses for failures that succeed on a clean retry:
# serialization_failure, deadlock_detected, lock_not_available, query_canceled
TRANSIENT_SQLSTATES = {"40001", "40P01", "55P03", "57014"}
UNIQUE_VIOLATION_SQLSTATE = "23505"
FOREIGN_KEY_VIOLATION_SQLSTATE = "23503"

STALE_REFERENCE_MESSAGE = "A referenced item no longer exists"


# ── Engine Configuration ──────────────────────────────────────────────────

def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    """SQLite ships with foreign key enforcement off; turn it on per connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, **overrides: Any) -> AsyncEngine:
    """
    Create an async engine for `url` with the configured pool and timeouts.

    Keyword overrides are passed straight to create_async_engine (tests use
    this to install a StaticPool for in-memory SQLite).
    """
    kwargs: dict[str, Any] = {
        "echo": settings.log_level == "DEBUG",
        "pool_pre_ping": settings.db_pool_pre_ping,
    }

    if not url.startswith("sqlite"):
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
            pool_recycle=3600,
        )
        if "+asyncpg" in url:
            kwargs["connect_args"] = {
                "timeout": settings.db_pool_timeout,
                "command_timeout": settings.db_command_timeout,
            }

    kwargs.update(overrides)
    engine = create_async_engine(url, **kwargs)

    if url.startswith("sqlite"):
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    return engine


engine = build_engine(settings.database_url)

# expire_on_commit=False: response serialization reads attributes after the
# service has committed, which would otherwise trigger lazy loads outside
# the async context.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class to register with the shared metadata
    that Alembic and the test suite's create_all() read.
    """
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits anything still pending
        4. On error: rolls back
        5. Always: closes the session (returns connection to pool)

    Services commit their own unit of work (see `transactional`), so the
    commit here is normally a no-op.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Error Classification ──────────────────────────────────────────────────
def _sqlstate(exc: sa_exc.DBAPIError) -> str | None:
    orig = getattr(exc, "orig", None)
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def is_transient_error(exc: BaseException) -> bool:
    """
    True when `exc` is a storage failure that may succeed on a retry.

    Covers pool checkout timeouts, statement timeouts, dropped connections,
    OperationalError (which includes SQLite's "database is locked") and
    PostgreSQL deadlock / serialization failures.
    """
    if isinstance(exc, (sa_exc.TimeoutError, asyncio.TimeoutError, TimeoutError)):
        return True
    if isinstance(exc, sa_exc.DBAPIError):
        if exc.connection_invalidated:
            return True
        if isinstance(exc, sa_exc.OperationalError):
            return True
        return _sqlstate(exc) in TRANSIENT_SQLSTATES
    return False


def is_unique_violation(exc: sa_exc.IntegrityError) -> bool:
    """True when an IntegrityError came from a UNIQUE / primary key constraint."""
    if _sqlstate(exc) == UNIQUE_VIOLATION_SQLSTATE:
        return True
    text = str(getattr(exc, "orig", exc)).lower()
    return "unique" in text or "duplicate key" in text


def is_foreign_key_violation(exc: sa_exc.IntegrityError) -> bool:
    """True when an IntegrityError came from a FOREIGN KEY constraint."""
    if _sqlstate(exc) == FOREIGN_KEY_VIOLATION_SQLSTATE:
        return True
    return "foreign key" in str(getattr(exc, "orig", exc)).lower()


async def flush_or_conflict(
    db: AsyncSession,
    conflict_message: Optional[str] = None,
    reference_field: Optional[str] = None,
) -> None:
    """
    Flush pending writes, translating constraint violations into client errors.

    Unique violation       → ConflictError(conflict_message)      (409)
    Foreign key violation  → ValidationError(field=reference_field) (400)

    A foreign key violation here means a row that passed its ownership check
    was deleted by a concurrent request before this flush. Anything else
    propagates unchanged (→ DatabaseError via `transactional`).
    """
    try:
        await db.flush()
    except sa_exc.IntegrityError as exc:
        if conflict_message is not None and is_unique_violation(exc):
            raise ConflictError(conflict_message) from exc
        if is_foreign_key_violation(exc):
            raise ValidationError(message=STALE_REFERENCE_MESSAGE, field=reference_field) from exc
        raise


# ── Unit of Work ──────────────────────────────────────────────────────────
def transactional(
    func: Callable[..., Awaitable[T]],
) -> Callable[..., Awaitable[T]]:
    """
    Run a service method as a single atomic transaction.

    The wrapped method must take `(self, db, ...)`. The decorator:
        - commits `db` after the method returns
        - rolls back on any exception, so no partial multi-row change survives
        - re-runs the whole method once more (STORAGE_RETRY_ATTEMPTS total)
          when the failure is transient
        - converts a transient failure that outlived the retries into
          StorageUnavailableError (503), and any other SQLAlchemy error into
          DatabaseError (500). Application errors (XyncError) pass through.

    Re-running the method is safe because the rollback discards everything
    the failed attempt did.
    """

    @functools.wraps(func)
    async def wrapper(self, db: AsyncSession, *args: Any, **kwargs: Any) -> T:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(settings.storage_retry_attempts),
            wait=wait_fixed(settings.storage_retry_wait),
            retry=retry_if_exception(is_transient_error),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    try:
                        result = await func(self, db, *args, **kwargs)
                        await db.commit()
                    except Exception:
                        await _safe_rollback(db)
                        raise
        except XyncError:
            raise
        except Exception as exc:
            if is_transient_error(exc):
                logger.error(
                    "Storage unavailable in %s after %d attempt(s): %s",
                    func.__qualname__,
                    settings.storage_retry_attempts,
                    type(exc).__name__,
                )
                raise StorageUnavailableError(
                    context={"operation": func.__qualname__},
                ) from exc
            if isinstance(exc, sa_exc.SQLAlchemyError):
                logger.error("Database error in %s", func.__qualname__, exc_info=True)
                raise DatabaseError(
                    context={"operation": func.__qualname__, "error_type": type(exc).__name__},
                ) from exc
            raise
        return result

    return wrapper


async def _safe_rollback(db: AsyncSession) -> None:
    # A dead connection can make rollback itself fail; the original error is
    # the one that matters to the caller.
    try:
        await db.rollback()
    except Exception:
        logger.warning("Rollback failed after an aborted transaction", exc_info=True)


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine() -> None:
    """Closes all pooled connections. Called during application shutdown."""
    await engine.dispose()
