"""
Database URL handling and asyncpg connection helpers.

The Postgres ledger and executors each open a short-lived connection per
operation, so a failed task never leaves a dirty connection behind for the
next one.

Examples:
    >>> normalize_database_url("postgresql+asyncpg://localhost/db")
    'postgresql://localhost/db'
    >>> sqlite_path("sqlite:///data/app.db")
    'data/app.db'
"""

from __future__ import annotations

import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import asyncpg

from dbupdater.core.errors import ConfigurationError

if TYPE_CHECKING:
    from asyncpg import Connection

_POSTGRES_SCHEMES = ("postgresql://", "postgres://", "postgresql+asyncpg://")
_SQLITE_SCHEME = "sqlite:///"


def normalize_database_url(url: str) -> str:
    """Normalize database URL for asyncpg compatibility.

    Strips the SQLAlchemy dialect prefix and the ``sslmode`` query
    parameter (asyncpg configures SSL through its own ``ssl=`` argument).
    """
    if url.startswith("postgresql+asyncpg://"):
        url = url.replace("postgresql+asyncpg://", "postgresql://", 1)

    if "?sslmode=" in url or "&sslmode=" in url:
        url = re.sub(r"[?&]sslmode=[^&]*", "", url)
        url = url.rstrip("?&")

    return url


def is_postgres_url(url: str) -> bool:
    return url.startswith(_POSTGRES_SCHEMES)


def is_sqlite_url(url: str) -> bool:
    return url.startswith(_SQLITE_SCHEME)


def sqlite_path(url: str) -> str:
    """Return the filesystem path of a ``sqlite:///`` URL.

    In-memory databases are rejected: the SQLite backends open a new
    connection per call, so each call would see an empty database.
    """
    if not is_sqlite_url(url):
        raise ConfigurationError(f"Not a SQLite URL: {url!r}", key="database_url")
    path = url[len(_SQLITE_SCHEME):]
    if path in ("", ":memory:"):
        raise ConfigurationError(
            f"SQLite URL must name a database file, got {url!r}", key="database_url"
        )
    return path


def require_url(url: str | None, owner: str) -> str:
    """Raise ``ConfigurationError`` when a backend was given no URL."""
    if not url:
        raise ConfigurationError(f'Parameter "database_url" is not set for {owner}', key="database_url")
    return url


def quote_identifier(name: str) -> str:
    """Quote a table name for interpolation into DDL/DML."""
    if not re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*", name):
        raise ConfigurationError(f"Invalid table name: {name!r}", key="table")
    return f'"{name}"'


@asynccontextmanager
async def connect(database_url: str, *, timeout: float = 60.0) -> AsyncIterator[Connection]:
    """Open an asyncpg connection and close it on exit."""
    conn = await asyncpg.connect(normalize_database_url(database_url), command_timeout=timeout)
    try:
        yield conn
    finally:
        await conn.close()


__all__ = [
    "normalize_database_url",
    "is_postgres_url",
    "is_sqlite_url",
    "sqlite_path",
    "require_url",
    "quote_identifier",
    "connect",
]
