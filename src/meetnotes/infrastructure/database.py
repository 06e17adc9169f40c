"""SQLAlchemy async database setup."""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from meetnotes.config import Settings, get_settings


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for the configured database.

    Pool sizing applies to server databases only; SQLite manages its own pool.
    """
    options: dict[str, Any] = {
        "echo": settings.is_development and settings.log_level.upper() == "DEBUG",
        "pool_pre_ping": True,
    }
    if not settings.database_url.startswith("sqlite"):
        options.update(pool_size=5, max_overflow=10)
    return create_async_engine(settings.database_url, **options)


engine = build_engine(get_settings())

# Session factory
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session. Services commit their own work; leftovers roll back."""
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
