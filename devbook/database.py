"""
Devbook API — Database Engine & Session Factory
================================================

What:  Async SQLAlchemy engine construction, session factory, and the
       declarative Base shared by all ORM models.
How:   create_app() calls `create_engine_from_settings()` once and hands the
       resulting session factory to the SQL repositories. Nothing here is
       created at import time.
Who:   main.py (wiring), repositories (sessions), Alembic (Base.metadata).

Connection Pooling Strategy:
    pool_size=20, max_overflow=10 → at most 30 PostgreSQL connections.
    pool_pre_ping validates a pooled connection before handing it out.
    pool_recycle=3600 recycles connections every hour.
    SQLite (used by the test suite) gets SQLAlchemy's default pool.
"""

from typing import Any, Dict

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from devbook.config import Settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class so they register with one shared
    metadata object (read by Alembic and by the test suite's create_all).
    """
    pass


def _engine_options(settings: Settings) -> Dict[str, Any]:
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if not settings.is_sqlite:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return options


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """
    Build the async engine for the configured database URL.

    The engine does not connect until first use, so building it at app
    creation is cheap even when the database is down.
    """
    return create_async_engine(settings.database_url, **_engine_options(settings))


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory used by the repositories.

    expire_on_commit=False keeps ORM attributes readable after the
    transaction closes, which the repositories rely on when they convert
    rows into response entities.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
