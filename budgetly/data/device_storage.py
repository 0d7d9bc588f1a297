"""General-purpose key/value device storage.

Stores string values in a single SQLite table so that they survive app
restarts. This is the storage used for the offline cache and the persisted
store snapshot; credentials never go here (see ``secure_store``).
"""

import logging
from pathlib import Path
from typing import Iterable, Optional

import aiosqlite

logger = logging.getLogger(__name__)


class DeviceStorage:
    """Async key/value store backed by SQLite.

    Example:
        >>> storage = DeviceStorage(tmp_path / "storage.db")
        >>> await storage.initialize()
        >>> await storage.set_item("greeting", "hello")
        >>> await storage.get_item("greeting")
        'hello'
    """

    def __init__(self, db_path: Path):
        """Initialize device storage.

        Args:
            db_path: Path to SQLite database file
        """
        self._db_path = db_path
        self._conn: Optional[aiosqlite.Connection] = None

    @property
    def path(self) -> Path:
        return self._db_path

    async def initialize(self) -> None:
        """Open the database and create the table if needed."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = await aiosqlite.connect(self._db_path)
        await self._ensure_schema()
        logger.info(f"Device storage initialized at {self._db_path}")

    async def _ensure_schema(self) -> None:
        await self._connection().execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """)
        await self._connection().commit()

    async def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    def _connection(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError("Device storage is not initialized")
        return self._conn

    async def get_item(self, key: str) -> Optional[str]:
        """Get a stored value.

        Args:
            key: Storage key

        Returns:
            Stored value or None
        """
        cursor = await self._connection().execute(
            "SELECT value FROM kv_store WHERE key = ?",
            (key,),
        )
        row = await cursor.fetchone()
        return row[0] if row else None

    async def set_item(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one.

        Args:
            key: Storage key
            value: Value to store
        """
        await self._connection().execute(
            """
            INSERT INTO kv_store (key, value)
            VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value
            """,
            (key, value),
        )
        await self._connection().commit()

    async def remove_item(self, key: str) -> None:
        await self._connection().execute("DELETE FROM kv_store WHERE key = ?", (key,))
        await self._connection().commit()

    async def get_all_keys(self) -> list[str]:
        cursor = await self._connection().execute("SELECT key FROM kv_store ORDER BY key")
        rows = await cursor.fetchall()
        return [row[0] for row in rows]

    async def multi_remove(self, keys: Iterable[str]) -> None:
        """Remove several keys in one transaction."""
        await self._connection().executemany(
            "DELETE FROM kv_store WHERE key = ?",
            [(key,) for key in keys],
        )
        await self._connection().commit()
