"""Connection pools: asyncpg for PostgreSQL, aiosqlite for local development."""

from __future__ import annotations

import asyncio
import re
from collections.abc import AsyncIterator, Mapping, Sequence
from contextlib import asynccontextmanager
from datetime import date
from pathlib import Path
from typing import Any, Final, Protocol, cast

import aiosqlite
import asyncpg

from lightbnb.config import Settings
from lightbnb.db.errors import QueryError
from lightbnb.logging import get_logger

logger = get_logger(__name__)

# Exceptions that mean the statement failed at the database, as opposed to
# bugs in this package.
DRIVER_ERRORS: Final[tuple[type[BaseException], ...]] = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    aiosqlite.Error,
    OSError,
)

_PLACEHOLDER_RE: Final = re.compile(r"\$(\d+)")


class Pool(Protocol):
    """The subset of asyncpg.Pool the repository relies on."""

    async def fetch(self, query: str, *args: Any) -> Sequence[Mapping[str, Any]]: ...

    async def fetchrow(self, query: str, *args: Any) -> Mapping[str, Any] | None: ...

    async def execute(self, query: str, *args: Any) -> Any: ...

    async def close(self) -> None: ...


def to_sqlite_placeholders(sql: str) -> str:
    """Rewrite PostgreSQL ``$n`` placeholders to SQLite's numbered ``?n`` form."""
    return _PLACEHOLDER_RE.sub(r"?\1", sql)


def _adapt_args(args: tuple[Any, ...]) -> tuple[Any, ...]:
    return tuple(a.isoformat() if isinstance(a, date) else a for a in args)


class SqlitePool:
    """Single-connection pool over aiosqlite with asyncpg's fetch interface.

    Access is serialized by a lock; each statement runs in its own
    transaction, committed on success and rolled back on failure.
    """

    def __init__(self, db_path: str) -> None:
        """Initialize the pool.

        Args:
            db_path: Path to SQLite database file, or ":memory:" for in-memory.
        """
        self.db_path = db_path
        self._conn: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()
        self._ensure_directory()

    def _ensure_directory(self) -> None:
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

    async def _get_connection(self) -> aiosqlite.Connection:
        if self._conn is None:
            self._conn = await aiosqlite.connect(self.db_path)
            self._conn.row_factory = aiosqlite.Row
            await self._conn.execute("PRAGMA busy_timeout=5000")
            await self._conn.execute("PRAGMA foreign_keys=ON")
            # LIKE is case-sensitive on PostgreSQL
            await self._conn.execute("PRAGMA case_sensitive_like=ON")
        return self._conn

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """Hold the connection for one unit of work."""
        async with self._lock:
            conn = await self._get_connection()
            try:
                yield conn
            except BaseException:
                await conn.rollback()
                raise
            else:
                await conn.commit()

    async def fetch(self, query: str, *args: Any) -> list[dict[str, Any]]:
        async with self.acquire() as conn:
            cursor = await conn.execute(to_sqlite_placeholders(query), _adapt_args(args))
            rows = await cursor.fetchall()
            await cursor.close()
        return [dict(row) for row in rows]

    async def fetchrow(self, query: str, *args: Any) -> dict[str, Any] | None:
        rows = await self.fetch(query, *args)
        return rows[0] if rows else None

    async def execute(self, query: str, *args: Any) -> int:
        """Run a statement and return the number of affected rows."""
        async with self.acquire() as conn:
            cursor = await conn.execute(to_sqlite_placeholders(query), _adapt_args(args))
            rowcount = cursor.rowcount
            await cursor.close()
        return rowcount

    async def close(self) -> None:
        """Close the underlying connection."""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None


async def create_pool(settings: Settings) -> Pool:
    """Create the process-wide pool described by settings.

    The caller owns the pool and must close it on shutdown.

    Raises:
        QueryError: If the PostgreSQL server cannot be reached.
    """
    if settings.is_sqlite:
        logger.info("sqlite_pool_created", db_path=settings.sqlite_path)
        return SqlitePool(settings.sqlite_path)

    try:
        pool = await asyncpg.create_pool(
            settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
        )
    except DRIVER_ERRORS as e:
        logger.error("pool_creation_failed", error=str(e))
        raise QueryError("create_pool", str(e)) from e

    logger.info(
        "postgres_pool_created",
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
    )
    return cast(Pool, pool)
