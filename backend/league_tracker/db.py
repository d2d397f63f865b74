"""Async engine and session factory, created on first use from ``DATABASE_URL``."""

import os
from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import NullPool


engine: Optional[AsyncEngine] = None
AsyncSessionLocal: Optional[sessionmaker] = None
Base = declarative_base()


def database_url() -> str:
    """Return ``DATABASE_URL`` with plain ``postgresql://`` mapped to asyncpg."""

    url = os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL environment variable is required")
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def get_engine() -> AsyncEngine:
    """Return the engine, creating it on first use.

    Stats reads open several sessions at once. SQLite therefore gets one
    connection per session (``NullPool``) and must be file-backed; other
    backends use a pre-pinged pool.
    """

    global engine, AsyncSessionLocal

    if engine is None:
        url = database_url()
        if url.startswith("sqlite"):
            if ":memory:" in url:
                raise RuntimeError("in-memory SQLite cannot serve concurrent sessions")
            engine = create_async_engine(url, poolclass=NullPool)
        else:
            engine = create_async_engine(url, pool_pre_ping=True)
        AsyncSessionLocal = sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False
        )

    return engine


def get_sessionmaker() -> sessionmaker:
    if AsyncSessionLocal is None:
        get_engine()
    assert AsyncSessionLocal is not None
    return AsyncSessionLocal


async def dispose_engine() -> None:
    """Close pooled connections and forget the engine; the next use rebuilds it."""

    global engine, AsyncSessionLocal

    if engine is not None:
        await engine.dispose()
    engine = None
    AsyncSessionLocal = None


async def get_session() -> AsyncIterator[AsyncSession]:
    async with get_sessionmaker()() as session:
        yield session
