"""
Async database access helpers (raw SQL) using asyncpg.

This module owns the connection pool. FastAPI initializes it on startup and
closes it on shutdown (see `api/main.py`).

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...

Every call is bounded by `DB_QUERY_TIMEOUT_S`. Driver, network and timeout
failures leave this module as `StorageError`.
"""

from __future__ import annotations

import asyncio
import os
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from .errors import StorageError

DEFAULT_QUERY_TIMEOUT_S = 3.0

_pool: asyncpg.Pool | None = None

_DRIVER_ERRORS = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    asyncio.TimeoutError,
)


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = os.environ.get("DATABASE_URL", "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


def query_timeout() -> float:
    timeout = _env_float("DB_QUERY_TIMEOUT_S", DEFAULT_QUERY_TIMEOUT_S)
    return timeout if timeout > 0 else DEFAULT_QUERY_TIMEOUT_S


async def init_pool() -> None:
    global _pool
    if _pool is not None:
        return None
    _pool = await asyncpg.create_pool(
        dsn=database_url(),
        min_size=_env_int("DB_POOL_MIN_SIZE", 1),
        max_size=_env_int("DB_POOL_MAX_SIZE", 25),
        command_timeout=query_timeout(),
        timeout=5,
    )


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return None
    await _pool.close()
    _pool = None


def pool() -> asyncpg.Pool:
    if _pool is None:
        raise RuntimeError("DB pool is not initialized. Call init_pool() on startup.")
    return _pool


@asynccontextmanager
async def _storage_errors() -> AsyncIterator[None]:
    try:
        yield
    except _DRIVER_ERRORS as exc:
        raise StorageError(f"{type(exc).__name__}: {exc}") from exc


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


def rows_affected(status: str) -> int:
    """
    Parse the affected-row count out of a command status tag.

    "DELETE 3" -> 3, "UPDATE 0" -> 0, "INSERT 0 1" -> 1.
    """
    tail = (status or "").rsplit(" ", 1)[-1]
    return int(tail) if tail.isdigit() else 0


async def fetch_one(sql: str, *args: Any) -> dict[str, Any] | None:
    """
    Run a query and return a single row as a dict (or None).
    """
    async with _storage_errors():
        row = await pool().fetchrow(sql, *args, timeout=query_timeout())
    return _record_to_dict(row) if row is not None else None


async def fetch_all(sql: str, *args: Any) -> list[dict[str, Any]]:
    """
    Run a query and return all rows as a list of dicts.
    """
    async with _storage_errors():
        rows = await pool().fetch(sql, *args, timeout=query_timeout())
    return [_record_to_dict(r) for r in rows]


async def execute(sql: str, *args: Any) -> str:
    """
    Run a statement (INSERT/UPDATE/DELETE/DDL) and return its status tag.
    """
    async with _storage_errors():
        return await pool().execute(sql, *args, timeout=query_timeout())


@asynccontextmanager
async def transaction(
    *,
    readonly: bool = False,
    isolation: str | None = None,
) -> AsyncIterator[asyncpg.Connection]:
    """
    Acquire a pooled connection and run the block inside one transaction.

    Statements issued on the yielded connection should pass
    `timeout=query_timeout()` themselves.
    """
    async with _storage_errors():
        async with pool().acquire(timeout=query_timeout()) as conn:  # type: asyncpg.Connection
            async with conn.transaction(isolation=isolation, readonly=readonly):
                yield conn
