"""
dbupdater - run one-time setup tasks exactly once, in order.

Tasks (usually SQL or Python files) are discovered by a task source,
checked against a ledger of tasks that already ran, and the outstanding
ones are executed one at a time by the first executor that claims them.

Example::

    from dbupdater import Reconciler, FileTaskSource, PostgresLedger
    from dbupdater import PostgresPythonExecutor, PostgresSqlExecutor

    url = "postgresql://postgres@localhost/app"
    reconciler = Reconciler(
        FileTaskSource("tasks"),
        PostgresLedger(url),
        [PostgresPythonExecutor(url), PostgresSqlExecutor(url)],
    )
    result = await reconciler.run()
    result.unwrap()
"""

from dbupdater.core import *  # noqa: F401,F403
from dbupdater.core import __all__ as _core_all
from dbupdater.engine import ExecutorRegistry, Reconciler, reconcile, validate
from dbupdater.executors import (
    CallableExecutor,
    PatternExecutor,
    PostgresPythonExecutor,
    PostgresSqlExecutor,
    SqliteSqlExecutor,
)
from dbupdater.ledgers import InMemoryLedger, PostgresLedger, SqliteLedger
from dbupdater.sources import FileTaskSource, InMemoryTaskSource

__version__ = "0.3.0"

__all__ = [
    *_core_all,
    "ExecutorRegistry",
    "Reconciler",
    "reconcile",
    "validate",
    "CallableExecutor",
    "PatternExecutor",
    "PostgresPythonExecutor",
    "PostgresSqlExecutor",
    "SqliteSqlExecutor",
    "InMemoryLedger",
    "PostgresLedger",
    "SqliteLedger",
    "FileTaskSource",
    "InMemoryTaskSource",
    "__version__",
]
