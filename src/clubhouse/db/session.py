"""Async engine and per-request sessions for the role and credential stores."""

from __future__ import annotations

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from clubhouse.config import settings


def _engine_options(url: str) -> dict:
    # SQLite (tests, local dev) uses a static pool and rejects pool sizing
    if url.startswith("sqlite"):
        return {}
    return {"pool_pre_ping": True, "pool_size": 5, "max_overflow": 10}


engine = create_async_engine(settings.database_url, echo=False, **_engine_options(settings.database_url))
async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession]:
    """One session per request; closed when the response is sent."""
    async with async_session_factory() as session:
        yield session
