"""PostgreSQL backend on an ``asyncpg`` pool.

``asyncpg`` is optional; install it with ``pip install stackpeek[data-pg]``.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from stackpeek.data.errors import DriverNotInstalledError


class PostgresDriver:
    name = "postgresql"

    __slots__ = ("_pool",)

    def __init__(self, pool: Any) -> None:
        self._pool = pool

    @classmethod
    async def open(cls, url: str, *, pool_size: int) -> PostgresDriver:
        try:
            import asyncpg
        except ImportError:
            msg = (
                "PostgreSQL databases require 'asyncpg'. "
                "Install it with: pip install stackpeek[data-pg]"
            )
            raise DriverNotInstalledError(msg) from None
        return cls(await asyncpg.create_pool(url, min_size=1, max_size=pool_size))

    async def execute(self, sql: str, params: Sequence[Any]) -> int:
        async with self._pool.acquire() as conn:
            status = await conn.execute(sql, *params)
        # Command tags look like "INSERT 0 1" or "UPDATE 3"
        tail = status.rsplit(" ", 1)[-1]
        return int(tail) if tail.isdigit() else 0

    async def fetch_val(self, sql: str, params: Sequence[Any]) -> Any:
        async with self._pool.acquire() as conn:
            return await conn.fetchval(sql, *params)

    async def close(self) -> None:
        await self._pool.close()
