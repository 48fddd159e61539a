"""
Database infrastructure

Async SQLAlchemy engine and session factory.
"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from socialnet.core.config import settings


def _engine_kwargs() -> dict:
    kwargs = {"echo": settings.db_echo, "pool_pre_ping": True}
    if not settings.is_sqlite:
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
        )
    return kwargs


engine = create_async_engine(settings.database_url, **_engine_kwargs())

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session per request; uncommitted work is rolled back on close"""
    async with AsyncSessionLocal() as session:
        yield session


async def init_models() -> None:
    """Create tables directly (local SQLite runs); deployments use Alembic"""
    from socialnet.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db_connection() -> None:
    await engine.dispose()
