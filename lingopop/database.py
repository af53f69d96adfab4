"""SQLite engine and session factory backing local storage."""

from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from lingopop.config import settings

# Milliseconds a writer waits for a concurrent CLI process to release the file
BUSY_TIMEOUT_MS = 5000


class Base(DeclarativeBase):
    """Base class for all ORM models."""


def build_engine(db_path: Path) -> AsyncEngine:
    """Create an aiosqlite engine for ``db_path`` with one connection per session."""
    new_engine = create_async_engine(
        f"sqlite+aiosqlite:///{db_path}",
        echo=False,
        poolclass=NullPool,
    )

    @event.listens_for(new_engine.sync_engine, "connect")
    def _set_busy_timeout(dbapi_connection: Any, connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute(f"PRAGMA busy_timeout={BUSY_TIMEOUT_MS}")
        cursor.close()

    return new_engine


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = build_engine(settings.db_path)
async_session = build_session_factory(engine)


async def create_tables(bind: AsyncEngine) -> None:
    """Create every table registered on ``Base.metadata``."""
    import lingopop.models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def init_db() -> None:
    """Initialize the application database."""
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)
    await create_tables(engine)
