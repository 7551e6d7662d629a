"""
Customer API — Database Session Management
===========================================

What:  Async SQLAlchemy engine factory, session factory, and FastAPI dependency.
How:   `create_app()` builds one engine (one connection pool) per application
       and stores it with its session factory on `app.state`. Each request
       receives its own AsyncSession through `get_db_session`, and that session
       is passed explicitly to every repository call.
Who:   Used by route handlers via FastAPI's dependency injection system.
When:  Engine is created with the app; sessions are created per-request.

Connection Pooling Strategy (PostgreSQL):
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for traffic spikes (total max = 30)
    pool_timeout=10:   Seconds to wait for a free connection; on expiry
                       SQLAlchemy raises TimeoutError, which the repository
                       reports as "store unavailable"
    pool_pre_ping:     Validates connections before use
    pool_recycle=3600: Recycles connections every hour
"""

from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from customer_api.config import Settings, settings as default_settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Every resource model inherits from this class so that its table is
    registered on the shared metadata used by Alembic and by the test suite.
    """
    pass


# ── Engine Configuration ──────────────────────────────────────────────────
def create_engine_from_settings(config: Optional[Settings] = None) -> AsyncEngine:
    """
    Build the async engine (and therefore the connection pool) from settings.

    SQLite URLs get the dialect's default pool; pool sizing arguments are only
    valid for QueuePool-backed drivers such as asyncpg.
    """
    config = config or default_settings
    kwargs: Dict[str, Any] = {
        # Echo SQL only when debugging; it is very noisy otherwise
        "echo": config.log_level == "DEBUG",
    }
    if not config.uses_sqlite:
        kwargs.update(
            pool_size=config.db_pool_size,
            max_overflow=config.db_max_overflow,
            pool_pre_ping=config.db_pool_pre_ping,
            pool_timeout=config.db_pool_timeout,
            pool_recycle=3600,
        )
    return create_async_engine(config.database_url, **kwargs)


# ── Session Factory ───────────────────────────────────────────────────────
def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Create the AsyncSession factory bound to `engine`.

    expire_on_commit=False keeps attribute values readable after commit, so
    handlers can serialize the object a repository just persisted.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Opens a session from the application's session factory
        2. Yields it to the route handler, which hands it to the repository
        3. On error: rolls back anything still pending
        4. Always: closes the session (returns the connection to the pool)

    Repositories commit their own writes, so nothing is committed here.

    Example usage in a route:
        @router.get("/customers")
        async def list_customers(db: AsyncSession = Depends(get_db_session)):
            return await repository.list(db)
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine(engine: AsyncEngine) -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    await engine.dispose()
