"""Async engine and session lifecycle for the search-history store.

The service keeps one engine per process. `init_db()` builds it from
`DATABASE_URL` when the API starts and `close_db()` disposes of it on
shutdown; request handlers borrow sessions through `get_db_session`.

PostgreSQL (asyncpg) is the deployment target. `sqlite+aiosqlite://` URLs
work for local runs and tests, in which case the pool options are skipped
because SQLite uses a static pool.

```python
await init_db(create=True)
async with get_db() as session:
    session.add(SearchHistory(city="Pune", temp=31.2, condition="Clear"))
    await session.commit()
```
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from agrisense.config import get_settings
from agrisense.database.models import Base

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None

_NOT_INITIALIZED = "Database not initialized; call init_db() on startup"


def _engine_options(database_url: str) -> dict[str, Any]:
    settings = get_settings()
    options: dict[str, Any] = {"echo": settings.database_echo}
    if not database_url.startswith("sqlite"):
        options.update(
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_pre_ping=True,
        )
    return options


def _require_engine() -> AsyncEngine:
    if _engine is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _engine


async def init_db(create: bool = False) -> None:
    """Build the process-wide engine and session factory.

    Args:
        create: Also issue CREATE TABLE for missing tables. Meant for local
            runs and tests; deployed databases are provisioned up front.
    """
    global _engine, _session_factory

    url = get_settings().database_url
    backend = url.split(":", 1)[0]
    logger.info(f"Connecting to history database ({backend})")

    _engine = create_async_engine(url, **_engine_options(url))
    _session_factory = async_sessionmaker(
        _engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )

    if create:
        await create_tables()


async def close_db() -> None:
    """Dispose of the engine; safe to call when it was never initialized."""
    global _engine, _session_factory

    if _engine is None:
        return
    logger.info("Closing history database connections")
    await _engine.dispose()
    _engine = None
    _session_factory = None


async def create_tables() -> None:
    """Create the search_history and alert_subscribers tables if missing."""
    async with _require_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"Ensured tables: {', '.join(sorted(Base.metadata.tables))}")


@asynccontextmanager
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Open a session; the caller commits, errors roll back."""
    if _session_factory is None:
        raise RuntimeError(_NOT_INITIALIZED)

    async with _session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a request-scoped session."""
    async with get_db() as session:
        yield session
