"""Database configuration and session management for the MVC layout."""

from __future__ import annotations

import logging
import math
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from app.config.settings import settings

# Import models so they are attached to Base.metadata before table creation
from app.models import Base  # noqa: F401 - ensures metadata is registered
from app.models import school  # noqa: F401

logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    """Raised when the school store cannot complete a read or write."""


def _register_sqlite_functions(dbapi_connection: Any, _connection_record: Any) -> None:
    """Provide the math functions used by distance queries on SQLite."""

    dbapi_connection.create_function("radians", 1, math.radians)
    dbapi_connection.create_function("cos", 1, math.cos)
    dbapi_connection.create_function("sin", 1, math.sin)
    dbapi_connection.create_function("acos", 1, math.acos)
    dbapi_connection.create_function("greatest", 2, max)
    dbapi_connection.create_function("least", 2, min)


def _create_engine() -> AsyncEngine:
    """Create an async engine with environment-appropriate pooling."""

    engine_options: dict[str, Any] = {
        "echo": settings.debug,
        "future": True,
        "pool_pre_ping": True,
    }

    url = make_url(settings.database.url)
    if settings.database.serverless or url.get_backend_name() == "sqlite":
        # Disable pooling when working with serverless databases or SQLite files.
        engine_options["poolclass"] = NullPool
    else:
        engine_options["pool_size"] = settings.database.pool_size

    async_engine = create_async_engine(url, **engine_options)
    if url.get_backend_name() == "sqlite":
        event.listen(async_engine.sync_engine, "connect", _register_sqlite_functions)
    return async_engine


engine: AsyncEngine = _create_engine()

SessionFactory = async_sessionmaker(
    engine,
    expire_on_commit=False,
    class_=AsyncSession,
)


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """Async context manager that yields a configured SQLAlchemy session."""

    async with SessionFactory() as session:
        yield session


async def get_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency-compatible generator yielding a configured session."""

    async with session_scope() as session:
        yield session


async def init_models() -> None:
    """Create database tables if they do not exist."""

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info(
        "Ensured database tables on %s.",
        make_url(settings.database.url).render_as_string(hide_password=True),
    )


async def dispose_engine() -> None:
    """Dispose of the engine and release pooled connections."""

    await engine.dispose()
