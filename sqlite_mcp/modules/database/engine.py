"""Shared SQLite handle.

One connection is opened at startup and held for the process lifetime. Calls
are pushed to worker threads so the event loop only suspends on engine I/O.
SQLite serializes writers on its own; no extra locking is done here.
"""

import asyncio
import sqlite3
from pathlib import Path
from typing import Any

from loguru import logger

from ...errors import DatabaseNotOpen


class Database:
    """Owns the single ``sqlite3`` connection used by every request."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self._conn: sqlite3.Connection | None = None

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def open(self) -> None:
        """
        Open the database file read-write.

        The file must already exist. Any failure propagates so that startup
        is aborted.
        """
        if self._conn is not None:
            return
        uri = f"file:{self.db_path.resolve().as_posix()}?mode=rw"
        try:
            conn = sqlite3.connect(uri, uri=True, check_same_thread=False)
        except sqlite3.Error as e:
            logger.error(f"Error opening database {self.db_path}: {e}")
            raise
        # Autocommit: every statement stands alone
        conn.isolation_level = None
        conn.row_factory = sqlite3.Row
        self._conn = conn
        logger.info(f"Connected to SQLite database: {self.db_path}")

    def close(self) -> None:
        if self._conn is None:
            return
        try:
            self._conn.close()
        except sqlite3.Error as e:
            logger.error(f"Error closing database: {e}")
            raise
        finally:
            self._conn = None
        logger.info("Database connection closed.")

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise DatabaseNotOpen(f"Database {self.db_path} is not open")
        return self._conn

    # Synchronous bodies, run in a worker thread

    def _fetch_all(self, sql: str) -> list[dict[str, Any]]:
        cursor = self._connection().cursor()
        try:
            cursor.execute(sql)
            return [dict(row) for row in cursor.fetchall()]
        finally:
            cursor.close()

    def _fetch_one(self, sql: str) -> dict[str, Any] | None:
        cursor = self._connection().cursor()
        try:
            cursor.execute(sql)
            row = cursor.fetchone()
            return dict(row) if row is not None else None
        finally:
            cursor.close()

    def _run(self, sql: str) -> tuple[int, int | None]:
        conn = self._connection()
        cursor = conn.cursor()
        try:
            # last_insert_rowid() is connection-wide; compare to spot a fresh insert
            before = cursor.execute("SELECT last_insert_rowid()").fetchone()[0]
            cursor.execute(sql)
            # rowcount is -1 for statements that do not touch rows (DDL)
            changes = max(cursor.rowcount, 0)
            after = cursor.execute("SELECT last_insert_rowid()").fetchone()[0]
        finally:
            cursor.close()
        if changes == 0 or after == before:
            return changes, None
        return changes, after

    # Awaitable API

    async def fetch_all(self, sql: str) -> list[dict[str, Any]]:
        """Run a row-returning statement and return every row as a dict."""
        return await asyncio.to_thread(self._fetch_all, sql)

    async def fetch_one(self, sql: str) -> dict[str, Any] | None:
        return await asyncio.to_thread(self._fetch_one, sql)

    async def run(self, sql: str) -> tuple[int, int | None]:
        """Run a mutation and return ``(changes, rowid of the row it inserted or None)``."""
        return await asyncio.to_thread(self._run, sql)
