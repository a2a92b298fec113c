"""
Executor registry - priority-ordered capability dispatch.

Executors are passed explicitly, in order, to the constructor. For a task
name the registry scans them in that order and selects the first one whose
``claims(name)`` returns True.

Registration order IS priority: when two executors could claim the same
name, the one registered first wins silently. This is part of the public
contract, not an error; use :meth:`ExecutorRegistry.claimants` to see
overlaps.

Example::

    registry = ExecutorRegistry([
        PostgresPythonExecutor(url),   # *.postgres-file-py.py
        PostgresSqlExecutor(url),      # *.postgres-file-sql.sql
    ])
    executor = registry.select("003_add_index.postgres-file-sql.sql")
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any

from dbupdater.core.errors import NoExecutorError
from dbupdater.core.logging import get_logger
from dbupdater.core.protocols import Executor


class ExecutorRegistry:
    """Ordered, immutable collection of executors."""

    def __init__(self, executors: Iterable[Executor], *, logger: Any = None) -> None:
        self._executors: tuple[Executor, ...] = tuple(executors)
        self._logger = logger or get_logger(__name__)

    def __len__(self) -> int:
        return len(self._executors)

    def __iter__(self) -> Iterator[Executor]:
        return iter(self._executors)

    def __repr__(self) -> str:
        names = ", ".join(type(e).__name__ for e in self._executors)
        return f"ExecutorRegistry([{names}])"

    def select(self, name: str) -> Executor:
        """Return the first executor claiming ``name``.

        Raises:
            NoExecutorError: If no executor claims the name.
        """
        for position, executor in enumerate(self._executors):
            if executor.claims(name):
                self._logger.debug(
                    "registry.executor_selected",
                    task=name,
                    executor=type(executor).__name__,
                    position=position,
                )
                return executor
        raise NoExecutorError(name)

    def claimants(self, name: str) -> list[Executor]:
        """Return every executor claiming ``name``, in priority order."""
        return [e for e in self._executors if e.claims(name)]


__all__ = ["ExecutorRegistry"]
