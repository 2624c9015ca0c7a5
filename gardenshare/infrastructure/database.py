"""Database configuration and session management.

Provides the async SQLAlchemy engine, the session factory and the
declarative base. Sessions are handed out per unit of work; nothing here
holds a connection across operations.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from gardenshare.infrastructure.config import settings

# Base class for models
Base = declarative_base()


def build_engine(database_url: str | None = None, echo: bool | None = None) -> AsyncEngine:
    """Create an async engine for the given URL (defaults from settings)."""
    return create_async_engine(
        database_url or settings.database_url,
        echo=settings.debug if echo is None else echo,
        pool_pre_ping=True,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# Engine and session factory for the configured database
engine = build_engine()
async_session_factory = build_session_factory(engine)


async def create_tables(bind: AsyncEngine | None = None) -> None:
    """Create database tables if they don't exist."""
    # Import models so they register on Base.metadata
    from gardenshare.infrastructure import models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
