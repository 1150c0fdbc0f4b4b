"""
PhotoCatalog Database Configuration
Async SQLAlchemy engine and session management.
"""

from typing import Any, AsyncIterator, Dict

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from photocatalog.config import Settings

# Base class for all models
Base = declarative_base()

PG_UNIQUE_VIOLATION = "23505"


def engine_options(settings: Settings) -> Dict[str, Any]:
    """Pool and driver options for the configured backend."""
    url = make_url(settings.sqlalchemy_url)
    options: Dict[str, Any] = {"echo": settings.debug, "pool_pre_ping": True}

    if url.get_backend_name() == "postgresql":
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_connect_timeout,
            pool_recycle=3600,
            connect_args={
                "timeout": settings.db_connect_timeout,
                "command_timeout": settings.db_statement_timeout,
                "server_settings": {
                    "statement_timeout": str(int(settings.db_statement_timeout * 1000)),
                },
            },
        )
    return options


def create_engine(settings: Settings) -> AsyncEngine:
    return create_async_engine(settings.sqlalchemy_url, **engine_options(settings))


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """
    Dependency that provides a database session from the application context.
    Use with FastAPI's Depends().
    """
    async with request.app.state.context.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when the store rejected a row for a duplicate unique key."""
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code is not None:
        return code == PG_UNIQUE_VIOLATION
    return "UNIQUE constraint failed" in str(orig)


async def init_db(engine: AsyncEngine) -> None:
    """
    Initialize database tables.
    For development/testing only - use Alembic migrations in production.
    """
    # Register the models with Base.metadata
    import photocatalog.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def ping_db(engine: AsyncEngine) -> None:
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def close_db(engine: AsyncEngine) -> None:
    """Close database connections."""
    await engine.dispose()
