"""Per-user preference persistence with SQLite."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import Dict, Optional

import aiosqlite

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path.home() / ".coinboard" / "preferences.db"

THEME_KEY = "theme"

SCHEMA = """
CREATE TABLE IF NOT EXISTS preferences (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""


class PreferencesDB:
    """Async SQLite key-value store for favorites and theme."""

    def __init__(self, db_path: Optional[Path] = None) -> None:
        self.db_path = db_path or DEFAULT_DB_PATH
        self._connection: Optional[aiosqlite.Connection] = None
        self._lock = asyncio.Lock()

    async def connect(self) -> None:
        """Initialize database connection and schema."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(self.db_path)
        self._connection.row_factory = aiosqlite.Row
        await self._connection.executescript(SCHEMA)
        await self._connection.commit()

    async def close(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    async def _ensure_connected(self) -> aiosqlite.Connection:
        """Ensure database is connected."""
        if not self._connection:
            await self.connect()
        return self._connection  # type: ignore

    async def get(self, key: str) -> Optional[str]:
        """Return the stored value for *key*, or None if absent."""
        conn = await self._ensure_connected()
        cursor = await conn.execute(
            "SELECT value FROM preferences WHERE key = ?",
            (key,),
        )
        row = await cursor.fetchone()
        return row["value"] if row else None

    async def set(self, key: str, value: str) -> None:
        """Insert or replace the value stored under *key*."""
        conn = await self._ensure_connected()
        async with self._lock:
            await conn.execute(
                """
                INSERT INTO preferences (key, value)
                VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (key, value),
            )
            await conn.commit()

    async def delete(self, key: str) -> bool:
        """Remove *key*. Returns True if a value was removed."""
        conn = await self._ensure_connected()
        async with self._lock:
            cursor = await conn.execute(
                "DELETE FROM preferences WHERE key = ?",
                (key,),
            )
            await conn.commit()
            return cursor.rowcount > 0

    async def get_all(self) -> Dict[str, str]:
        conn = await self._ensure_connected()
        cursor = await conn.execute("SELECT key, value FROM preferences ORDER BY key")
        rows = await cursor.fetchall()
        return {row["key"]: row["value"] for row in rows}


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


DEFAULT_THEME = Theme.DARK


class ThemeStore:
    """Persisted light/dark theme preference."""

    def __init__(self, db: PreferencesDB) -> None:
        self.db = db
        self._theme = DEFAULT_THEME

    @property
    def theme(self) -> Theme:
        return self._theme

    async def load(self) -> Theme:
        """Read the stored theme, falling back to dark on absent or unknown values."""
        raw = await self.db.get(THEME_KEY)
        if raw is None:
            self._theme = DEFAULT_THEME
        else:
            try:
                self._theme = Theme(raw)
            except ValueError:
                logger.warning(f"Ignoring unknown stored theme {raw!r}")
                self._theme = DEFAULT_THEME
        return self._theme

    async def toggle(self) -> Theme:
        """Flip the theme and persist it."""
        self._theme = Theme.LIGHT if self._theme == Theme.DARK else Theme.DARK
        await self.db.set(THEME_KEY, self._theme.value)
        return self._theme
