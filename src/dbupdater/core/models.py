"""
Value types shared by the engine and its collaborators.

``Task`` and ``ExecutionRecord`` are read-only snapshots for a single
reconciliation pass; nothing here is cached across runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class Task:
    """A named, content-addressed unit of one-time work.

    Attributes:
        name: Stable identity (for file sources, the file name)
        fingerprint: Content hash used to detect drift
    """

    name: str
    fingerprint: str


@dataclass(frozen=True, slots=True)
class ExecutionRecord:
    """Ledger entry written once, after a task ran successfully."""

    name: str
    fingerprint: str
    executed_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "fingerprint": self.fingerprint,
            "executed_at": self.executed_at.isoformat(),
        }


@dataclass(frozen=True)
class RunReport:
    """Outcome of a successful run.

    ``executed`` lists tasks run in this pass, in execution order;
    ``skipped`` lists tasks already present in the ledger.
    """

    executed: tuple[str, ...] = ()
    skipped: tuple[str, ...] = ()
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @property
    def changed(self) -> bool:
        return bool(self.executed)

    def to_dict(self) -> dict[str, Any]:
        return {
            "executed": list(self.executed),
            "skipped": list(self.skipped),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
        }


@dataclass(frozen=True)
class RunPlan:
    """What a run would do right now, computed without executing anything."""

    pending: tuple[Task, ...] = ()
    applied: tuple[ExecutionRecord, ...] = field(default_factory=tuple)

    @property
    def up_to_date(self) -> bool:
        return not self.pending

    def to_dict(self) -> dict[str, Any]:
        return {
            "pending": [{"name": t.name, "fingerprint": t.fingerprint} for t in self.pending],
            "applied": [r.to_dict() for r in self.applied],
        }


__all__ = ["Task", "ExecutionRecord", "RunReport", "RunPlan"]
