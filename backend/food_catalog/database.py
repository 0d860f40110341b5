"""
Food Catalog Backend: Database Session Management
==================================================

What:  Async SQLAlchemy engine, session factory, declarative base and the
       FastAPI session dependency.
How:   One engine per process; one AsyncSession per request.
Who:   The session dependency is consumed by route-level service factories;
       the engine is used by the health check and Alembic.

Transactions:
    FoodRepository commits each mutation itself so that a returned record
    is durable before the lifecycle service deletes any superseded image.
    get_db_session still commits at the end of the request (a no-op when
    nothing is pending) and rolls back on any exception.
"""

from typing import Any, AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from food_catalog.config import settings


def _engine_options(database_url: str) -> Dict[str, Any]:
    """
    Engine keyword arguments for the given URL.

    SQLite (tests, local runs) gets NullPool: aiosqlite connections are tied
    to the event loop that opened them, so they must not be pooled across
    loops. Server databases get the configured QueuePool sizing.
    """
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if database_url.startswith("sqlite"):
        options["poolclass"] = NullPool
    else:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return options


engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))

# expire_on_commit=False keeps attributes readable after the repository
# commits, outside of any further query.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all ORM models; its metadata drives Alembic."""
    pass


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    1. Creates a session from the factory
    2. Yields it to the route's service factory
    3. On success: commits anything still pending
    4. On error: rolls back and re-raises for the global handlers
    5. Always: closes the session (returns the connection)
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def dispose_engine() -> None:
    """Close all pooled connections. Called from the shutdown lifespan."""
    await engine.dispose()
