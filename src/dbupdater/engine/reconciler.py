"""
Reconciliation engine - validate, then execute outstanding tasks in order.

Manifesto:
    Setup tasks (schema changes, data fixes) must run exactly once, in their
    declared order, on every deployment. The engine compares what the task
    source declares with what the ledger says already ran, refuses to start
    when the two disagree, and otherwise runs the missing tasks one at a
    time, recording each before moving on.

    - **Validate before any side effect:** duplicates, orphan records and
      fingerprint drift abort the run with zero executions
    - **Strict order:** tasks run in the order the source returns them
    - **Fail fast:** the first failure stops the run; nothing is retried or
      rolled back; tasks already recorded stay recorded
    - **One at a time:** each I/O call is awaited before the next starts

Architecture:
    ::

        Reconciler.run()
          │
          ├── source.init() → source.list_tasks()      ─┐ snapshot
          ├── ledger.init() → ledger.list_records()     ─┘
          │
          ├── validate(tasks, records)        IntegrityError
          │
          └── for task in tasks:              (source order)
                ├── recorded?  → skip
                ├── cancel / deadline?        RunCancelledError
                ├── registry.select(name)     NoExecutorError
                ├── source.get_content(task)  SourceReadError
                ├── executor.run(task, text)  ExecutionError
                └── ledger.append_record()    LedgerWriteError

Guardrails:
    ❌ DON'T: Run two reconcilers against the same ledger concurrently
    ✅ DO: Serialize runs externally (deployment convention, advisory lock)

    ❌ DON'T: Write executors that break when re-run
    ✅ DO: Make every task idempotent - a crash between run and ledger
       append re-executes the task on the next run

Example::

    reconciler = Reconciler(
        FileTaskSource("tasks"),
        SqliteLedger("app.db"),
        [SqliteSqlExecutor("app.db")],
    )
    match await reconciler.run():
        case Ok(report):
            print(report.executed)
        case Err(error):
            print(error)

Tags:
    reconciliation, migrations, ordering, fail-fast, idempotent, dbupdater

Doc-Types:
    - API Reference
    - Architecture Decision Record
"""

from __future__ import annotations

import asyncio
import uuid
from collections import Counter
from collections.abc import Callable, Iterable, Sequence
from datetime import UTC, datetime
from typing import Any

from dbupdater.core.errors import (
    ConfigurationError,
    ExecutionError,
    IntegrityError,
    IntegrityViolation,
    LedgerReadError,
    LedgerWriteError,
    RunCancelledError,
    SourceReadError,
    UpdaterError,
    as_updater_error,
)
from dbupdater.core.logging import LogContext, get_logger
from dbupdater.core.models import ExecutionRecord, RunPlan, RunReport, Task
from dbupdater.core.protocols import ExecutionLedger, Executor, TaskSource
from dbupdater.core.result import Err, Ok, Result, try_result_async
from dbupdater.engine.registry import ExecutorRegistry

_log = get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


def _duplicates(names: Iterable[str]) -> list[str]:
    return sorted(name for name, count in Counter(names).items() if count > 1)


def validate(
    tasks: Sequence[Task],
    records: Sequence[ExecutionRecord],
) -> dict[str, ExecutionRecord]:
    """Check the task set and the ledger against each other.

    Checks run in a fixed order and the first violation is raised:
    duplicate task names, duplicate record names, orphan records, then
    fingerprint drift (first drifted task in source order).

    Returns:
        Ledger records keyed by task name.

    Raises:
        IntegrityError: On any violation.
    """
    task_names = [t.name for t in tasks]

    duplicates = _duplicates(task_names)
    if duplicates:
        raise IntegrityError(IntegrityViolation.DUPLICATE_TASK_NAMES, names=duplicates)

    duplicates = _duplicates(r.name for r in records)
    if duplicates:
        raise IntegrityError(IntegrityViolation.DUPLICATE_RECORD_NAMES, names=duplicates)

    known = set(task_names)
    orphans = sorted(r.name for r in records if r.name not in known)
    if orphans:
        raise IntegrityError(IntegrityViolation.ORPHAN_RECORDS, names=orphans)

    recorded = {r.name: r for r in records}
    for task in tasks:
        record = recorded.get(task.name)
        if record is not None and record.fingerprint != task.fingerprint:
            raise IntegrityError(
                IntegrityViolation.FINGERPRINT_MISMATCH,
                names=[task.name],
                expected=record.fingerprint,
                actual=task.fingerprint,
            )

    return recorded


def _check_cancelled(
    task: Task,
    executed: list[str],
    cancel: asyncio.Event | None,
    deadline: float | None,
) -> None:
    if cancel is not None and cancel.is_set():
        raise RunCancelledError(task.name, executed=executed, reason="cancelled")
    if deadline is not None and asyncio.get_running_loop().time() >= deadline:
        raise RunCancelledError(task.name, executed=executed, reason="deadline exceeded")


async def reconcile(
    tasks: Sequence[Task],
    records: Sequence[ExecutionRecord],
    executors: ExecutorRegistry | Iterable[Executor],
    *,
    source: TaskSource,
    ledger: ExecutionLedger,
    logger: Any = None,
    clock: Clock = utc_now,
    cancel: asyncio.Event | None = None,
    deadline: float | None = None,
) -> RunReport:
    """Validate, then run every unrecorded task in source order.

    Args:
        tasks: Task snapshot, in declared execution order
        records: Ledger snapshot
        executors: Executors in priority order (or a prepared registry)
        source: Where task content is fetched from
        ledger: Where successful executions are appended
        logger: Injected structured logger
        clock: Returns the ``executed_at`` timestamp for each record
        cancel: Checked between tasks; when set the run stops
        deadline: Event-loop time after which no further task starts

    Raises:
        IntegrityError, NoExecutorError, SourceReadError, ExecutionError,
        LedgerWriteError, RunCancelledError
    """
    log = logger or _log
    tasks = list(tasks)
    records = list(records)

    recorded = validate(tasks, records)
    registry = executors if isinstance(executors, ExecutorRegistry) else ExecutorRegistry(executors, logger=log)
    log.info(
        "reconcile.validated",
        tasks=len(tasks),
        recorded=len(recorded),
        pending=len(tasks) - len(recorded),
    )

    started_at = clock()
    executed: list[str] = []
    skipped: list[str] = []

    for task in tasks:
        if task.name in recorded:
            skipped.append(task.name)
            log.debug("reconcile.task_skipped", task=task.name)
            continue

        _check_cancelled(task, executed, cancel, deadline)

        executor = registry.select(task.name)
        executor_name = type(executor).__name__

        try:
            content = await source.get_content(task)
        except Exception as exc:
            raise SourceReadError(task.name, cause=exc) from exc

        log.info("reconcile.task_started", task=task.name, executor=executor_name)
        try:
            await executor.run(task, content)
        except Exception as exc:
            log.error("reconcile.task_failed", task=task.name, executor=executor_name, error=str(exc))
            raise ExecutionError(task.name, cause=exc).with_context(executor=executor_name) from exc

        try:
            await ledger.append_record(task, executed_at=clock())
        except Exception as exc:
            log.error("reconcile.ledger_write_failed", task=task.name, error=str(exc))
            raise LedgerWriteError(task.name, cause=exc) from exc

        executed.append(task.name)
        log.info("reconcile.task_executed", task=task.name)

    return RunReport(
        executed=tuple(executed),
        skipped=tuple(skipped),
        started_at=started_at,
        finished_at=clock(),
    )


class Reconciler:
    """Embedding API: wires a task source, a ledger and executors.

    Parameters
    ----------
    source
        Task source; order of ``list_tasks()`` is the execution order.
    ledger
        Execution ledger; the reconciler is its only writer during a run.
    executors
        Executors in priority order. The first one claiming a task name
        runs it, even if later ones would claim it too.
    logger
        Structured logger used by the engine (defaults to this module's).
    clock
        Source of ``executed_at`` timestamps (UTC now by default).
    """

    def __init__(
        self,
        source: TaskSource | None,
        ledger: ExecutionLedger | None,
        executors: Iterable[Executor] | None,
        *,
        logger: Any = None,
        clock: Clock = utc_now,
    ) -> None:
        self._logger = logger or _log
        self.source = source
        self.ledger = ledger
        self.executors = (
            ExecutorRegistry(executors, logger=self._logger) if executors is not None else None
        )
        self._clock = clock

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run(
        self,
        *,
        cancel: asyncio.Event | None = None,
        deadline: float | None = None,
    ) -> Result[RunReport]:
        """Initialise collaborators, validate and execute pending tasks.

        Returns ``Ok(RunReport)`` or ``Err`` with the first error met.
        """
        run_id = uuid.uuid4().hex[:12]
        async with LogContext(run_id=run_id):
            result = (
                await try_result_async(lambda: self._execute(cancel=cancel, deadline=deadline))
            ).map_err(lambda exc: as_updater_error(exc).with_context(run_id=run_id))

            match result:
                case Ok(report):
                    self._logger.info(
                        "reconcile.completed",
                        executed=len(report.executed),
                        skipped=len(report.skipped),
                    )
                case Err(error):
                    self._logger.error("reconcile.failed", **error.to_dict())
            return result

    async def plan(self) -> Result[RunPlan]:
        """Report pending and applied tasks without executing anything."""
        return (
            (await try_result_async(self._plan))
            .map_err(as_updater_error)
            .inspect_err(lambda error: self._logger.error("reconcile.plan_failed", **error.to_dict()))
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _execute(
        self,
        *,
        cancel: asyncio.Event | None,
        deadline: float | None,
    ) -> RunReport:
        self._require(executors=True)
        tasks, records = await self._snapshot()
        return await reconcile(
            tasks,
            records,
            self.executors,
            source=self.source,
            ledger=self.ledger,
            logger=self._logger,
            clock=self._clock,
            cancel=cancel,
            deadline=deadline,
        )

    async def _plan(self) -> RunPlan:
        self._require(executors=False)
        tasks, records = await self._snapshot()
        recorded = validate(tasks, records)
        return RunPlan(
            pending=tuple(t for t in tasks if t.name not in recorded),
            applied=tuple(recorded[t.name] for t in tasks if t.name in recorded),
        )

    def _require(self, *, executors: bool) -> None:
        if self.source is None:
            raise ConfigurationError("Task source is not set", key="source")
        if self.ledger is None:
            raise ConfigurationError("Execution ledger is not set", key="ledger")
        if executors and self.executors is None:
            raise ConfigurationError("Executors are not set", key="executors")

    async def _snapshot(self) -> tuple[list[Task], list[ExecutionRecord]]:
        """Initialise both collaborators and read their full state once."""
        try:
            await self.source.init()
            tasks = await self.source.list_tasks()
        except UpdaterError:
            raise
        except Exception as exc:
            raise SourceReadError(None, cause=exc) from exc

        try:
            await self.ledger.init()
            records = await self.ledger.list_records()
        except UpdaterError:
            raise
        except Exception as exc:
            raise LedgerReadError(cause=exc) from exc

        return list(tasks), list(records)


__all__ = ["Clock", "utc_now", "validate", "reconcile", "Reconciler"]
