"""
Jotter — Database Session Management
=====================================

What:  Async SQLAlchemy engine/session factory builders and the per-request
       session dependency.
How:   The application factory builds one engine and one session factory and
       keeps them on `app.state`. Route dependencies pull a session from
       there, so no module-level connection exists.

Session lifecycle (per request):
    1. Session created from `request.app.state.session_factory`
    2. NoteService commits each write before the handler builds its response
    3. Any exception → rollback, then re-raise
    4. Session always closed (connection returned to the pool)
"""

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from jotter.config import Settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares one metadata object between the models, `create_all` in
    development/tests, and Alembic autogenerate.
    """
    pass


def build_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async engine for the configured database.

    Pool sizing only applies to server databases; SQLite engines use the
    dialect's default pool and reject `pool_size`/`max_overflow`.
    """
    options = {
        "echo": settings.log_level == "DEBUG",
    }
    if not settings.is_sqlite:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(settings.database_url, **options)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: templates read attributes after the commit
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create all tables that don't exist yet (dev/test shortcut for Alembic)."""
    # Import models so the metadata sees them before create_all
    from jotter.models import note  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    Rolls back when the handler raises and re-raises for the global handlers.
    Committing is not done here: this exit code runs after the response has
    been sent, so writes are committed by NoteService through
    `NoteRepository.commit()` instead.
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
