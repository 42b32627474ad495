"""Async database engine, session factory and unit-of-work helper."""

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import get_settings
from app.core.exceptions import StoreError

settings = get_settings()


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create the async engine; pool tuning only applies to server databases."""
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=echo)
    return create_async_engine(
        url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        echo=echo,
    )


def build_session_maker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


engine = build_engine(settings.async_database_url, echo=settings.debug)
async_session_maker = build_session_maker(engine)


@asynccontextmanager
async def unit_of_work(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """One store round-trip: commit on success, roll back and re-raise on error."""
    async with session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that yields an async DB session."""
    async with unit_of_work(async_session_maker) as session:
        yield session


@asynccontextmanager
async def store_call(
    session_maker: async_sessionmaker[AsyncSession],
    operation: str,
) -> AsyncIterator[AsyncSession]:
    """unit_of_work that reports driver/ORM failures as StoreError."""
    try:
        async with unit_of_work(session_maker) as session:
            yield session
    except SQLAlchemyError as exc:
        raise StoreError(operation, exc) from exc
