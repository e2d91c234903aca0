"""SQLite backend: stdlib ``sqlite3`` driven from anyio worker threads.

One connection per database. Statements are serialized with an
``anyio.Lock`` and each blocking call runs via ``anyio.to_thread``, so
the connection is opened with ``check_same_thread=False``.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Sequence
from typing import Any

import anyio
import anyio.to_thread


class SqliteDriver:
    name = "sqlite"

    __slots__ = ("_conn", "_lock")

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._lock = anyio.Lock()

    @classmethod
    async def open(cls, path: str) -> SqliteDriver:
        """Open *path* (or ``:memory:``) in autocommit mode."""
        conn = await anyio.to_thread.run_sync(
            lambda: sqlite3.connect(path, autocommit=True, check_same_thread=False)
        )
        return cls(conn)

    async def execute(self, sql: str, params: Sequence[Any]) -> int:
        async with self._lock:
            cursor = await anyio.to_thread.run_sync(self._conn.execute, sql, params)
        return cursor.rowcount

    async def fetch_val(self, sql: str, params: Sequence[Any]) -> Any:
        def first_column() -> Any:
            row = self._conn.execute(sql, params).fetchone()
            return None if row is None else row[0]

        async with self._lock:
            return await anyio.to_thread.run_sync(first_column)

    async def close(self) -> None:
        async with self._lock:
            await anyio.to_thread.run_sync(self._conn.close)
