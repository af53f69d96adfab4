"""Durable local key-value storage backed by SQLite."""

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lingopop.database import async_session
from lingopop.models import StoredValue

logger = logging.getLogger(__name__)

# Fixed keys
API_KEY_KEY = "gemini_api_key"
NOTEBOOK_KEY = "lingopop_notebook"


class LocalStorage:
    """String key-value store persisted in the application database.

    Each call opens its own session and commits before returning, so a
    completed ``set_item`` is durable.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        self._session_factory = session_factory or async_session

    async def get_item(self, key: str) -> str | None:
        """Return the stored value for ``key`` or None if absent."""
        async with self._session_factory() as session:
            row = await session.get(StoredValue, key)
            return row.value if row is not None else None

    async def set_item(self, key: str, value: str) -> None:
        """Insert or replace the value stored under ``key``."""
        async with self._session_factory() as session:
            row = await session.get(StoredValue, key)
            if row is None:
                session.add(StoredValue(key=key, value=value))
            else:
                row.value = value
            await session.commit()

        logger.debug("Stored %d chars under '%s'", len(value), key)

    async def remove_item(self, key: str) -> bool:
        """Delete ``key``. Returns True if a value was removed."""
        async with self._session_factory() as session:
            result = await session.execute(delete(StoredValue).where(StoredValue.key == key))
            await session.commit()
            removed = bool(result.rowcount)

        if removed:
            logger.debug("Removed '%s' from local storage", key)
        return removed

    async def keys(self) -> list[str]:
        """Return all stored keys in alphabetical order."""
        async with self._session_factory() as session:
            result = await session.execute(select(StoredValue.key).order_by(StoredValue.key))
            return list(result.scalars().all())
