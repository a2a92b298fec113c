"""
dbupdater core - contracts, value types, errors and ambient utilities.

Modules
-------
errors      Typed error hierarchy (UpdaterError and subclasses)
result      Ok / Err result envelope
models      Task, ExecutionRecord, RunReport, RunPlan
protocols   TaskSource, ExecutionLedger, Executor contracts
hashing     Content fingerprints
logging     structlog configuration
settings    pydantic-settings configuration
database    URL handling and asyncpg connections
"""

from dbupdater.core.errors import (
    ConfigurationError,
    ErrorCategory,
    ErrorContext,
    ExecutionError,
    IntegrityError,
    IntegrityViolation,
    LedgerReadError,
    LedgerWriteError,
    NoExecutorError,
    RunCancelledError,
    SourceReadError,
    TaskError,
    UpdaterError,
)
from dbupdater.core.hashing import compute_fingerprint
from dbupdater.core.models import ExecutionRecord, RunPlan, RunReport, Task
from dbupdater.core.protocols import ExecutionLedger, Executor, TaskSource
from dbupdater.core.result import Err, Ok, Result

__all__ = [
    "ConfigurationError",
    "ErrorCategory",
    "ErrorContext",
    "ExecutionError",
    "IntegrityError",
    "IntegrityViolation",
    "LedgerReadError",
    "LedgerWriteError",
    "NoExecutorError",
    "RunCancelledError",
    "SourceReadError",
    "TaskError",
    "UpdaterError",
    "compute_fingerprint",
    "ExecutionRecord",
    "RunPlan",
    "RunReport",
    "Task",
    "ExecutionLedger",
    "Executor",
    "TaskSource",
    "Err",
    "Ok",
    "Result",
]
