"""Async database access for stackpeek apps.

The inspection page only needs to know whether the configured database
answers; apps can also run plain statements through the same object::

    from stackpeek.data import Database

    db = Database("sqlite:///app.db")
    count = await db.fetch_val("SELECT COUNT(*) FROM users")
    await db.ping()

SQLite uses the standard library (blocking calls run in an ``anyio``
worker thread). PostgreSQL needs ``asyncpg``::

    pip install stackpeek[data-pg]
"""

from stackpeek.data.database import Database, detect_driver
from stackpeek.data.errors import DataError, DriverNotInstalledError, QueryError

__all__ = [
    "DataError",
    "Database",
    "DriverNotInstalledError",
    "QueryError",
    "detect_driver",
]
