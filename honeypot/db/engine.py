"""Async database engine, session factory, and lifespan management.

Uses SQLAlchemy 2.0 async; SQLite through aiosqlite by default.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from honeypot.config import settings


def _engine_options(database_url: str) -> dict[str, Any]:
    if database_url.startswith("sqlite"):
        return {"echo": False}
    return {
        "echo": settings.log_level == "DEBUG",
        "pool_size": 10,
        "max_overflow": 20,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
    }


# ── Async engine ─────────────────────────────────────────────────────

engine: AsyncEngine = create_async_engine(
    settings.db.database_url,
    **_engine_options(settings.db.database_url),
)

# ── Session factory ──────────────────────────────────────────────────

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for FastAPI — yields an async DB session.

    Usage:
        @router.get("/example")
        async def handler(db: AsyncSession = Depends(get_session)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# ── Lifespan helpers ─────────────────────────────────────────────────


def ensure_database_directory(database_url: str | None = None) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    url = make_url(database_url or settings.db.database_url)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)


async def check_connection() -> None:
    """Open one connection and run a trivial query."""
    ensure_database_directory()
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def sync_models() -> None:
    """Create missing tables outside production.

    In production, tables are created via Alembic migrations.
    """
    if settings.is_production:
        return
    async with engine.begin() as conn:
        # Import here to ensure all models are registered with Base.metadata
        from honeypot.models import Base

        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose the engine's connection pool."""
    await engine.dispose()
