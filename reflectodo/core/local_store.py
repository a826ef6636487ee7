"""SQLite-backed key-value store holding whole serialized values under fixed keys."""

import logging
from pathlib import Path

import aiosqlite

from reflectodo.core.config import settings


logger = logging.getLogger(__name__)

_SCHEMA = """CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated TEXT NOT NULL DEFAULT (datetime('now'))
)"""


class LocalStore:
    """A tiny persistent key-value store.

    Each call opens its own connection, so the store holds no open handles
    between operations and needs no shutdown.
    """

    def __init__(self, db_path: str | Path | None = None) -> None:
        self._db_path = Path(db_path or settings.local_store_path).resolve()

    @property
    def path(self) -> Path:
        return self._db_path

    async def _connect(self) -> aiosqlite.Connection:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = await aiosqlite.connect(str(self._db_path))
        await conn.execute(_SCHEMA)
        return conn

    async def get_item(self, key: str) -> str | None:
        """Return the value stored under ``key``, or None when absent."""
        conn = await self._connect()
        try:
            cursor = await conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,))
            row = await cursor.fetchone()
        finally:
            await conn.close()
        return row[0] if row else None

    async def set_item(self, key: str, value: str) -> None:
        """Replace the value stored under ``key``."""
        conn = await self._connect()
        try:
            await conn.execute(
                "INSERT INTO kv_store (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated = datetime('now')",
                (key, value),
            )
            await conn.commit()
        finally:
            await conn.close()
        logger.debug("Wrote local store entry", extra={"key": key, "bytes": len(value)})

