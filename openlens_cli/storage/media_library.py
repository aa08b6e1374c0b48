"""
Manages the SQLite index of videos saved into the media library.
"""

import asyncio
import logging
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Any

from openlens_cli.exceptions import PersistenceError

log = logging.getLogger(__name__)


class MediaLibrary:
    """
    A small SQLite index of saved assets. Each saved video gets a row and the
    row id serves as the asset reference handed back to callers.
    """

    def __init__(self, config_dir_path: Path):
        self.db_path = config_dir_path / "media_library.sqlite"
        self._lock = asyncio.Lock()
        self._initialize_db()

    def _get_connection(self) -> sqlite3.Connection:
        """Gets a new database connection."""
        conn = sqlite3.connect(self.db_path, timeout=30, check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        return conn

    def _initialize_db(self) -> None:
        """Creates the database and table if they don't exist."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            with closing(self._get_connection()) as conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS saved_assets (
                        asset_id INTEGER PRIMARY KEY AUTOINCREMENT,
                        path TEXT NOT NULL,
                        size_bytes INTEGER NOT NULL DEFAULT 0,
                        saved_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    );
                    """
                )
                conn.commit()
        except (OSError, sqlite3.Error) as e:
            log.error(f"Failed to initialize media library at '{self.db_path}': {e}")

    def _register_sync(self, path: Path, size_bytes: int) -> int:
        try:
            with closing(self._get_connection()) as conn:
                cur = conn.execute(
                    "INSERT INTO saved_assets (path, size_bytes) VALUES (?, ?)",
                    (str(path), size_bytes),
                )
                conn.commit()
                return int(cur.lastrowid)
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not register '{path.name}': {e}") from e

    async def register(self, path: Path, size_bytes: int) -> int:
        """Adds a saved file to the index and returns its asset id."""
        async with self._lock:
            return await asyncio.to_thread(self._register_sync, path, size_bytes)

    def _list_assets_sync(self, limit: int) -> list[dict[str, Any]]:
        try:
            with closing(self._get_connection()) as conn:
                conn.row_factory = sqlite3.Row
                rows = conn.execute(
                    """
                    SELECT asset_id, path, size_bytes, saved_at
                    FROM saved_assets
                    ORDER BY asset_id DESC
                    LIMIT ?
                    """,
                    (limit,),
                ).fetchall()
                return [dict(row) for row in rows]
        except sqlite3.Error as e:
            log.error(f"Failed to read media library: {e}")
            return []

    async def list_assets(self, limit: int = 20) -> list[dict[str, Any]]:
        """Returns the most recently saved assets, newest first."""
        return await asyncio.to_thread(self._list_assets_sync, limit)

    def _get_stats_sync(self) -> dict[str, Any] | None:
        try:
            with closing(self._get_connection()) as conn:
                total_assets, total_size = conn.execute(
                    "SELECT COUNT(*), COALESCE(SUM(size_bytes), 0) FROM saved_assets"
                ).fetchone()
                return {"total_assets": total_assets, "total_size": total_size}
        except sqlite3.Error as e:
            log.error(f"Failed to get media library stats: {e}")
            return None

    async def get_stats(self) -> dict[str, Any] | None:
        """Retrieves totals from the media library index."""
        return await asyncio.to_thread(self._get_stats_sync)
