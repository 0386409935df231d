# stockwatch/database.py

import os
from contextlib import asynccontextmanager
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from stockwatch.core.config import get_settings

Base = declarative_base()

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker] = None


def get_database_url() -> str:
    settings = get_settings()

    # Use environment variable directly if settings is empty
    database_url = settings.DATABASE_URL or os.environ.get('DATABASE_URL', '')
    if not database_url:
        raise ValueError("DATABASE_URL is not set in environment variables")

    # Convert postgresql:// to postgresql+asyncpg:// for async support
    if database_url.startswith('postgresql://'):
        database_url = database_url.replace('postgresql://', 'postgresql+asyncpg://', 1)
    return database_url


def get_engine() -> AsyncEngine:
    """Engine is created on first use so importing models never needs a database."""
    global _engine
    if _engine is None:
        database_url = get_database_url()
        pool_options = {}
        if database_url.startswith('postgresql'):
            pool_options = dict(pool_size=10, max_overflow=20, pool_timeout=30, pool_recycle=1800)
        _engine = create_async_engine(database_url, echo=False, future=True, **pool_options)
    return _engine


def async_session() -> AsyncSession:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False
        )
    return _session_factory()


@asynccontextmanager
async def get_session():
    session = async_session()
    try:
        yield session
    finally:
        await session.close()
