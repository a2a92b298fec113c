"""
Build a :class:`Reconciler` from :class:`UpdaterSettings`.

The database URL scheme picks the ledger and executor family:

==================  ==================  ==========================================
URL                 Ledger              Executors (priority order)
==================  ==================  ==========================================
``postgresql://``   PostgresLedger      PostgresPythonExecutor, PostgresSqlExecutor
``sqlite:///``      SqliteLedger        SqliteSqlExecutor
==================  ==================  ==========================================
"""

from __future__ import annotations

from typing import Any

from dbupdater.core.database import is_postgres_url, is_sqlite_url, require_url, sqlite_path
from dbupdater.core.errors import ConfigurationError
from dbupdater.core.logging import get_logger
from dbupdater.core.protocols import ExecutionLedger, Executor
from dbupdater.core.settings import UpdaterSettings
from dbupdater.engine.reconciler import Reconciler
from dbupdater.executors import PostgresPythonExecutor, PostgresSqlExecutor, SqliteSqlExecutor
from dbupdater.ledgers import PostgresLedger, SqliteLedger
from dbupdater.sources import FileTaskSource


def build_backends(
    settings: UpdaterSettings, *, logger: Any = None
) -> tuple[ExecutionLedger, list[Executor]]:
    """Return the ledger and executors matching ``settings.database_url``."""
    url = require_url(settings.database_url, "dbupdater")

    if is_postgres_url(url):
        return (
            PostgresLedger(url, table=settings.ledger_table, logger=logger),
            [
                PostgresPythonExecutor(url, logger=logger),
                PostgresSqlExecutor(url, logger=logger),
            ],
        )

    if is_sqlite_url(url):
        path = sqlite_path(url)
        return (
            SqliteLedger(path, table=settings.ledger_table, logger=logger),
            [SqliteSqlExecutor(path, logger=logger)],
        )

    raise ConfigurationError(f"Unsupported database URL: {url!r}", key="database_url")


def build_reconciler(settings: UpdaterSettings, *, logger: Any = None) -> Reconciler:
    """Wire a file task source, ledger and executors from settings."""
    logger = logger or get_logger("dbupdater")
    ledger, executors = build_backends(settings, logger=logger)
    source = FileTaskSource(
        settings.tasks_dir,
        read_concurrency=settings.read_concurrency,
        logger=logger,
    )
    return Reconciler(source, ledger, executors, logger=logger)


__all__ = ["build_backends", "build_reconciler"]
