"""
Database Session Management

Async SQLAlchemy engine and session factory.
Provides the `get_db` FastAPI dependency used by all API routers.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from gubaye.config import settings


def _engine_kwargs(url: str) -> dict[str, Any]:
    """Engine options per backend (SQLite has no connection pool sizing)."""
    if url.startswith("sqlite"):
        return {"echo": settings.DEBUG}
    return {"echo": settings.DEBUG, "pool_pre_ping": True, "pool_size": 5, "max_overflow": 10}


engine = create_async_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))

AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session.

    Commits on success, rolls back on any exception, always closes.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def close_db() -> None:
    """Dispose of the engine's connection pool."""
    await engine.dispose()
