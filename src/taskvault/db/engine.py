"""Async SQLAlchemy engine and session factory.

One engine per process, one AsyncSession per request (handed out by the
get_db dependency). PostgreSQL via asyncpg is the production target; a
sqlite+aiosqlite URL works for local runs and tests.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from taskvault.config import settings


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine with pool settings suited to the dialect.

    SQLite has no server-side pool to size, so pool arguments are only
    passed for client/server databases.
    """
    kwargs: dict = {"echo": echo, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs["pool_size"] = 5
        kwargs["max_overflow"] = 15
    return create_async_engine(url, **kwargs)


engine = build_engine(settings.database_url, echo=settings.debug)

# expire_on_commit=False so returned ORM objects stay readable after commit.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncSession:
    """FastAPI dependency — yields a session per request, auto-closes."""
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
