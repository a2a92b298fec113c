"""Executor backed by a Python callable."""

from __future__ import annotations

import inspect
import re
from collections.abc import Awaitable, Callable
from typing import Any

from dbupdater.core.models import Task
from dbupdater.executors.base import PatternExecutor

TaskFunc = Callable[[Task, str], Awaitable[None] | None]


class CallableExecutor(PatternExecutor):
    """Runs tasks by calling ``func(task, content)``; sync or async.

    Example::

        async def apply(task, content):
            await http.post("/admin/setup", content=content)

        executor = CallableExecutor(r"\\.setup\\.json$", apply)
    """

    def __init__(
        self,
        pattern: str | re.Pattern[str],
        func: TaskFunc,
        *,
        logger: Any = None,
    ) -> None:
        super().__init__(pattern, logger=logger)
        self.func = func

    async def run(self, task: Task, content: str) -> None:
        outcome = self.func(task, content)
        if inspect.isawaitable(outcome):
            await outcome


__all__ = ["CallableExecutor", "TaskFunc"]
