# lidobook/db/database.py
import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Awaitable, Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

from lidobook.core.config import settings
from lidobook.core.exceptions import BookingError, StorageError
from lidobook.core.logging import logger

_TX_DEPTH = "lidobook.tx_depth"
_AFTER_COMMIT = "lidobook.after_commit"


def _engine_options(url: str) -> dict:
    options = {"echo": settings.DEBUG}
    # SQLite pools do not accept sizing arguments
    if not url.startswith("sqlite"):
        options.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
        )
    return options


DATABASE_URL = settings.DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://")

# Create async engine
engine = create_async_engine(DATABASE_URL, **_engine_options(DATABASE_URL))

# Create async session factory
async_session_local = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Database session dependency"""
    async with async_session_local() as session:
        try:
            yield session
        finally:
            await session.close()


def after_commit(session: AsyncSession, hook: Callable[[], Awaitable[None]]) -> None:
    """Run ``hook`` once the outermost transaction on ``session`` commits.

    Hooks are dropped on rollback. A failing or slow hook is logged and never
    affects the committed work.
    """
    session.info.setdefault(_AFTER_COMMIT, []).append(hook)


async def _run_after_commit(session: AsyncSession) -> None:
    hooks = session.info.pop(_AFTER_COMMIT, [])
    for hook in hooks:
        try:
            await asyncio.wait_for(hook(), timeout=settings.NOTIFICATION_TIMEOUT_SECONDS)
        except asyncio.TimeoutError:
            logger.warning("After-commit hook timed out (ignored)")
        except Exception:
            logger.exception("After-commit hook failed (ignored)")


async def _discard(session: AsyncSession) -> None:
    session.info.pop(_AFTER_COMMIT, None)
    await session.rollback()


@asynccontextmanager
async def transaction(session: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    """Unit of work over ``session``.

    The outermost block commits on success and rolls back on any error; nested
    blocks join the outer one, so a cascade spanning two services is atomic.
    Storage failures surface as ``StorageError``.
    """
    depth = session.info.get(_TX_DEPTH, 0)
    session.info[_TX_DEPTH] = depth + 1
    try:
        try:
            yield session
        except BookingError:
            if depth == 0:
                await _discard(session)
            raise
        except SQLAlchemyError as exc:
            if depth == 0:
                await _discard(session)
            raise StorageError(f"Storage failure: {exc.__class__.__name__}") from exc
        except BaseException:
            if depth == 0:
                await _discard(session)
            raise

        if depth == 0:
            try:
                await session.commit()
            except SQLAlchemyError as exc:
                await _discard(session)
                raise StorageError(f"Commit failed: {exc.__class__.__name__}") from exc
    finally:
        session.info[_TX_DEPTH] = depth

    if depth == 0:
        await _run_after_commit(session)


@asynccontextmanager
async def reading(session: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    """Read-only counterpart of ``transaction``: nothing to commit, same error surface"""
    try:
        yield session
    except SQLAlchemyError as exc:
        if session.info.get(_TX_DEPTH, 0) == 0:
            await session.rollback()
        raise StorageError(f"Storage failure: {exc.__class__.__name__}") from exc


async def init_db():
    """Initialize database (create tables)"""
    from lidobook.db.base import Base
    # Import all models to ensure they're registered
    from lidobook.db import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db():
    """Close database connections"""
    await engine.dispose()
