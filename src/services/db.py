"""Async database engine and session management."""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool


def to_async_url(database_url: str) -> str:
    """Map a sync SQLite URL onto the aiosqlite driver; other URLs pass through."""
    if database_url.startswith("sqlite:///"):
        return database_url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    return database_url


def create_engine_for(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine (SQLite uses StaticPool for simplicity in dev/test)."""
    async_url = to_async_url(database_url)
    if async_url.startswith("sqlite"):
        return create_async_engine(
            async_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(async_url, echo=echo, pool_pre_ping=True)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory that keeps loaded rows usable after commit."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def session_scope(database_url: str, echo: bool = False) -> AsyncGenerator[AsyncSession, None]:
    """Yield one session and dispose of the engine afterwards.

    Example:
        ```python
        async for session in session_scope("sqlite:///./rental_ledger.db"):
            service = LedgerService.from_session(session)
        ```
    """
    engine = create_engine_for(database_url, echo=echo)
    factory = create_session_factory(engine)
    try:
        async with factory() as session:
            yield session
    finally:
        await engine.dispose()


__all__ = ["create_engine_for", "create_session_factory", "session_scope", "to_async_url"]
