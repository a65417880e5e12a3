"""
Async engine and session factory.

One pooled engine per database URL. Every pool checkout, connect and
statement is bounded by a timeout from settings so that no request waits on
the database indefinitely.
"""

from typing import AsyncGenerator, Optional

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from venue_booking.core.config import get_settings

_engines: dict[str, AsyncEngine] = {}
_sessionmakers: dict[str, async_sessionmaker[AsyncSession]] = {}


def _engine_options(url: str) -> dict:
    settings = get_settings()
    backend = make_url(url).get_backend_name()

    if backend == "sqlite":
        # sqlite3's busy timeout bounds how long a writer waits for the file lock
        return {"connect_args": {"timeout": settings.DB_CONNECT_TIMEOUT}}

    return {
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "pool_recycle": settings.DB_POOL_RECYCLE,
        "pool_pre_ping": True,
        "connect_args": {
            "timeout": settings.DB_CONNECT_TIMEOUT,
            "command_timeout": settings.DB_COMMAND_TIMEOUT,
        },
    }


def get_engine(database_url: Optional[str] = None) -> AsyncEngine:
    url = database_url or get_settings().DATABASE_URL
    engine = _engines.get(url)
    if engine is None:
        engine = create_async_engine(url, echo=False, **_engine_options(url))
        _engines[url] = engine
    return engine


def get_sessionmaker(database_url: Optional[str] = None) -> async_sessionmaker[AsyncSession]:
    url = database_url or get_settings().DATABASE_URL
    factory = _sessionmakers.get(url)
    if factory is None:
        factory = async_sessionmaker(get_engine(url), class_=AsyncSession, expire_on_commit=False)
        _sessionmakers[url] = factory
    return factory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding a session per request.
    Services own their commits; anything left open here is rolled back.
    """
    async with get_sessionmaker()() as session:
        yield session


async def dispose_engine(database_url: Optional[str] = None) -> None:
    url = database_url or get_settings().DATABASE_URL
    engine = _engines.pop(url, None)
    _sessionmakers.pop(url, None)
    if engine is not None:
        await engine.dispose()
