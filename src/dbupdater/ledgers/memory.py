"""
In-memory execution ledger.

Records live for the lifetime of the object only. Suitable for tests and
dry runs; not durable across processes.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from dbupdater.core.models import ExecutionRecord, Task

__all__ = ["InMemoryLedger"]


class InMemoryLedger:
    """Append-only list of :class:`ExecutionRecord`."""

    def __init__(self, records: Iterable[ExecutionRecord] = ()) -> None:
        self.records: list[ExecutionRecord] = list(records)
        self.initialized = False

    async def init(self) -> None:
        self.initialized = True

    async def list_records(self) -> list[ExecutionRecord]:
        return list(self.records)

    async def append_record(self, task: Task, *, executed_at: datetime) -> ExecutionRecord:
        record = ExecutionRecord(name=task.name, fingerprint=task.fingerprint, executed_at=executed_at)
        self.records.append(record)
        return record

    @property
    def names(self) -> list[str]:
        return [r.name for r in self.records]
