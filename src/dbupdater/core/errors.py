"""
Structured error types for dbupdater.

Every failure a run can produce is a typed ``UpdaterError`` carrying a
category, structured context and the chained underlying exception. The
engine raises these internally; :class:`~dbupdater.engine.reconciler.Reconciler`
hands the first one back to the caller inside an ``Err``.

Manifesto:
    - **Typed hierarchy:** One class per failure kind in a run
    - **Explicit cause:** The backend exception is kept as ``cause`` and
      chained through ``__cause__`` so tracebacks stay complete
    - **Never retryable:** Nothing in a run is retried automatically; an
      operator has to fix the task, the backend or the ledger first
    - **Serializable:** ``to_dict()`` feeds structured logs and CLI JSON

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                        UpdaterError                           │
        │               (category, context, cause)                      │
        ├──────────────────────────────────────────────────────────────┤
        │  ConfigurationError     CONFIG      collaborator missing       │
        │  IntegrityError         INTEGRITY   duplicates/orphans/drift   │
        │  NoExecutorError        DISPATCH    no executor claims task    │
        │  SourceReadError        SOURCE      content/list fetch failed  │
        │  LedgerReadError        LEDGER      ledger init/list failed    │
        │  LedgerWriteError       LEDGER      append after run failed    │
        │  ExecutionError         EXECUTION   executor run failed        │
        │  RunCancelledError      CANCELLED   stopped between tasks      │
        └──────────────────────────────────────────────────────────────┘

Examples:
    >>> err = NoExecutorError("001_init.sql")
    >>> err.task_name
    '001_init.sql'
    >>> err.to_dict()["category"]
    'DISPATCH'

    Chaining a backend failure:

    >>> try:
    ...     raise OSError("disk gone")
    ... except OSError as e:
    ...     err = SourceReadError("002_data.sql", cause=e)
    >>> err.cause
    OSError('disk gone')

Tags:
    error-handling, exception-hierarchy, error-context, dbupdater

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error categories used for classification and log routing."""

    CONFIG = "CONFIG"            # Missing collaborator or setting
    INTEGRITY = "INTEGRITY"      # Task set and ledger disagree
    DISPATCH = "DISPATCH"        # No executor for a task
    SOURCE = "SOURCE"            # Task source I/O
    LEDGER = "LEDGER"            # Ledger I/O
    EXECUTION = "EXECUTION"      # Backend run failed
    CANCELLED = "CANCELLED"      # Run stopped on request
    INTERNAL = "INTERNAL"        # Bugs, unexpected state


class IntegrityViolation(str, Enum):
    """The kinds of disagreement between the task set and the ledger."""

    DUPLICATE_TASK_NAMES = "DUPLICATE_TASK_NAMES"
    DUPLICATE_RECORD_NAMES = "DUPLICATE_RECORD_NAMES"
    ORPHAN_RECORDS = "ORPHAN_RECORDS"
    FINGERPRINT_MISMATCH = "FINGERPRINT_MISMATCH"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        run_id: Identifier of the reconciliation run
        task: Name of the task being processed
        executor: Class name of the selected executor
        backend: Backend description (table, directory, ...)
        metadata: Additional key-value pairs
    """

    run_id: str | None = None
    task: str | None = None
    executor: str | None = None
    backend: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["run_id", "task", "executor", "backend"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class UpdaterError(Exception):
    """
    Base exception for all dbupdater errors.

    Subclasses set ``default_category``; every instance carries a message,
    a category, an :class:`ErrorContext` and an optional cause.

    Examples:
        >>> error = UpdaterError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.with_context(run_id="abc").context.run_id
        'abc'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    @property
    def retryable(self) -> bool:
        """Runs are never retried automatically."""
        return False

    def with_context(self, **kwargs: Any) -> UpdaterError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ExecutionError(task.name, cause=exc).with_context(
                executor="PostgresSqlExecutor"
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }

        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict

        if self.cause is not None:
            result["cause"] = f"{type(self.cause).__name__}: {self.cause}"

        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION
# =============================================================================


class ConfigurationError(UpdaterError):
    """A required collaborator or setting is absent or invalid."""

    default_category = ErrorCategory.CONFIG

    def __init__(self, message: str, *, key: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.key = key


# =============================================================================
# INTEGRITY
# =============================================================================


class IntegrityError(UpdaterError):
    """
    The task set and the ledger disagree in a way that cannot be auto-resolved.

    Raised during validation, before any executor is consulted. ``kind``
    says which check failed; ``names`` lists the offending task names.
    For ``FINGERPRINT_MISMATCH`` the ledger value is ``expected`` and the
    value the task source reports now is ``actual``.

    Examples:
        >>> err = IntegrityError(IntegrityViolation.ORPHAN_RECORDS, names=["z.sql"])
        >>> str(err)
        'Ledger holds records for unknown tasks: z.sql'
    """

    default_category = ErrorCategory.INTEGRITY

    def __init__(
        self,
        kind: IntegrityViolation,
        *,
        names: list[str] | tuple[str, ...] = (),
        expected: str | None = None,
        actual: str | None = None,
        message: str | None = None,
        **kwargs: Any,
    ):
        self.kind = kind
        self.names = tuple(names)
        self.expected = expected
        self.actual = actual
        super().__init__(message or self._describe(), **kwargs)

    def _describe(self) -> str:
        joined = ", ".join(self.names)
        if self.kind is IntegrityViolation.DUPLICATE_TASK_NAMES:
            return f"Task set contains duplicate names: {joined}"
        if self.kind is IntegrityViolation.DUPLICATE_RECORD_NAMES:
            return f"Ledger contains duplicate names: {joined}"
        if self.kind is IntegrityViolation.ORPHAN_RECORDS:
            return f"Ledger holds records for unknown tasks: {joined}"
        return f"Task {joined} was executed with fingerprint {self.expected} but is now {self.actual}"

    @property
    def name(self) -> str | None:
        """The single offending task name, for fingerprint mismatches."""
        return self.names[0] if len(self.names) == 1 else None

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["kind"] = self.kind.value
        result["names"] = list(self.names)
        if self.expected is not None:
            result["expected"] = self.expected
        if self.actual is not None:
            result["actual"] = self.actual
        return result


# =============================================================================
# PER-TASK FAILURES
# =============================================================================


class TaskError(UpdaterError):
    """Base for failures tied to one task of the run."""

    def __init__(self, task_name: str | None, message: str, **kwargs: Any):
        self.task_name = task_name
        super().__init__(message, **kwargs)
        if task_name is not None:
            self.context.task = task_name


class NoExecutorError(TaskError):
    """No registered executor claims the task's name."""

    default_category = ErrorCategory.DISPATCH

    def __init__(self, task_name: str, **kwargs: Any):
        super().__init__(task_name, f"No executor found for task {task_name}", **kwargs)


class SourceReadError(TaskError):
    """The task source failed to initialise, list tasks or return content."""

    default_category = ErrorCategory.SOURCE

    def __init__(self, task_name: str | None, *, message: str | None = None, **kwargs: Any):
        if message is None:
            message = (
                f"Failed to read content of task {task_name}"
                if task_name is not None
                else "Failed to read task source"
            )
        super().__init__(task_name, message, **kwargs)


class ExecutionError(TaskError):
    """The selected executor failed while running the task."""

    default_category = ErrorCategory.EXECUTION

    def __init__(self, task_name: str, **kwargs: Any):
        super().__init__(task_name, f"Task {task_name} failed", **kwargs)


class LedgerReadError(TaskError):
    """The ledger failed to initialise or list its records."""

    default_category = ErrorCategory.LEDGER

    def __init__(self, *, message: str = "Failed to read execution ledger", **kwargs: Any):
        super().__init__(None, message, **kwargs)


class LedgerWriteError(TaskError):
    """
    The ledger append failed after the task itself ran successfully.

    The task's side effect has happened but is not recorded, so the next
    run will execute it again. Executors are expected to be idempotent.
    """

    default_category = ErrorCategory.LEDGER

    def __init__(self, task_name: str, **kwargs: Any):
        super().__init__(
            task_name,
            f"Task {task_name} ran but could not be recorded in the ledger",
            **kwargs,
        )


class RunCancelledError(TaskError):
    """The run was cancelled or hit its deadline between two tasks."""

    default_category = ErrorCategory.CANCELLED

    def __init__(
        self,
        task_name: str,
        *,
        executed: list[str] | tuple[str, ...] = (),
        reason: str = "cancelled",
        **kwargs: Any,
    ):
        self.executed = tuple(executed)
        self.reason = reason
        super().__init__(task_name, f"Run {reason} before task {task_name}", **kwargs)


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def as_updater_error(error: Exception) -> UpdaterError:
    """Return ``error`` unchanged if typed, else wrap it as an ``INTERNAL`` error.

    Examples:
        >>> as_updater_error(ValueError("bad pattern")).message
        'Unexpected ValueError: bad pattern'
    """
    if isinstance(error, UpdaterError):
        return error
    return UpdaterError(f"Unexpected {type(error).__name__}: {error}", cause=error)


__all__ = [
    "ErrorCategory",
    "IntegrityViolation",
    "ErrorContext",
    "UpdaterError",
    "ConfigurationError",
    "IntegrityError",
    "TaskError",
    "NoExecutorError",
    "SourceReadError",
    "ExecutionError",
    "LedgerReadError",
    "LedgerWriteError",
    "RunCancelledError",
    "as_updater_error",
]
