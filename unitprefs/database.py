"""
Database connection and session management
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker, AsyncEngine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool
from pathlib import Path
from typing import Optional
import os

from .config import settings

# Database URL
DATABASE_URL = os.getenv("DATABASE_URL", settings.database_url)

# Base class for models
Base = declarative_base()


def create_engine_for(url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for the given database URL

    SQLite engines share a single connection (StaticPool) so that
    in-memory databases survive across sessions.

    Args:
        url: SQLAlchemy database URL
        echo: Log every SQL statement

    Returns:
        AsyncEngine
    """
    if url.startswith("sqlite"):
        return create_async_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=echo,
        )
    return create_async_engine(url, pool_pre_ping=True, echo=echo)


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    """Create an async session factory bound to an engine"""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


def _ensure_sqlite_directory(url: str) -> None:
    """Create the parent directory of a file-backed SQLite database"""
    prefix = "sqlite+aiosqlite:///"
    if url.startswith(prefix) and len(url) > len(prefix):
        Path(url[len(prefix):]).parent.mkdir(parents=True, exist_ok=True)


# Create async engine
engine = create_engine_for(DATABASE_URL, echo=settings.database_echo)

# Create async session factory
AsyncSessionLocal = create_session_factory(engine)


async def init_db(bind: Optional[AsyncEngine] = None):
    """Initialize database (create tables)"""
    # Register models on Base.metadata
    from . import models  # noqa: F401

    if bind is None:
        _ensure_sqlite_directory(DATABASE_URL)
        bind = engine

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
