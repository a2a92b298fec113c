"""
Collaborator contracts for the reconciliation engine.

The engine depends on three shapes only: a source of tasks, a ledger of
executed tasks and a set of executors. Concrete backends satisfy them
structurally; no base class is required and nothing defaults to "not
implemented".

Architecture:
    ::

        protocols.py (YOU ARE HERE)
        ├── TaskSource       : init / list_tasks / get_content
        ├── ExecutionLedger  : init / list_records / append_record
        └── Executor         : claims / run

    Implementations:
        sources/   FileTaskSource, InMemoryTaskSource
        ledgers/   PostgresLedger, SqliteLedger, InMemoryLedger
        executors/ PostgresSqlExecutor, PostgresPythonExecutor,
                   SqliteSqlExecutor, CallableExecutor

Guardrails:
    ❌ DON'T: Put reconciliation logic in a backend
    ✅ DO: Keep backends to I/O; the engine owns validation and ordering

    ❌ DON'T: Return an unordered collection from ``list_tasks``
    ✅ DO: Return tasks in their declared, deterministic execution order

Tags:
    protocol, contracts, task-source, ledger, executor, dbupdater
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from dbupdater.core.models import ExecutionRecord, Task


@runtime_checkable
class TaskSource(Protocol):
    """Discovers candidate tasks and fetches their content on demand."""

    async def init(self) -> None:
        """Prepare the source (e.g. create the tasks directory)."""
        ...

    async def list_tasks(self) -> list[Task]:
        """Return all tasks in declared execution order.

        The order is authoritative and must be deterministic.
        """
        ...

    async def get_content(self, task: Task) -> str:
        """Return the body of ``task``."""
        ...


@runtime_checkable
class ExecutionLedger(Protocol):
    """Durable record of which tasks already ran."""

    async def init(self) -> None:
        """Create the backing store if it is absent."""
        ...

    async def list_records(self) -> list[ExecutionRecord]:
        """Return every record in the ledger."""
        ...

    async def append_record(self, task: Task, *, executed_at: datetime) -> ExecutionRecord:
        """Persist a record for ``task``.

        Must be durable before returning.
        """
        ...


@runtime_checkable
class Executor(Protocol):
    """Backend able to claim tasks by name and run their content.

    ``claims`` must be a pure predicate. ``run`` performs the side effect and
    raises on failure.
    """

    def claims(self, name: str) -> bool:
        ...

    async def run(self, task: Task, content: str) -> None:
        ...


__all__ = ["TaskSource", "ExecutionLedger", "Executor"]
