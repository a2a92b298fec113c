"""
In-memory task source.

Holds task bodies in a mapping and preserves insertion order. Suitable for
tests and for applications that ship their tasks as package data.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from dbupdater.core.hashing import compute_fingerprint
from dbupdater.core.models import Task

__all__ = ["InMemoryTaskSource"]


class InMemoryTaskSource:
    """Task source over ``{name: content}`` pairs.

    Example::

        source = InMemoryTaskSource({
            "001_users.sql": "CREATE TABLE users (id integer primary key);",
            "002_seed.sql": "INSERT INTO users VALUES (1);",
        })

    Pairs may also be given as an iterable of tuples, which allows the same
    name twice (the engine rejects such a set during validation).
    """

    def __init__(self, tasks: Mapping[str, str] | Iterable[tuple[str, str]] = ()) -> None:
        items = tasks.items() if isinstance(tasks, Mapping) else tasks
        self._items: list[tuple[str, str]] = list(items)

    async def init(self) -> None:
        return None

    async def list_tasks(self) -> list[Task]:
        return [Task(name=name, fingerprint=compute_fingerprint(body)) for name, body in self._items]

    async def get_content(self, task: Task) -> str:
        for name, body in self._items:
            if name == task.name:
                return body
        raise KeyError(task.name)

    def put(self, name: str, content: str) -> None:
        """Replace the body of ``name`` or append a new task."""
        for index, (existing, _) in enumerate(self._items):
            if existing == name:
                self._items[index] = (name, content)
                return
        self._items.append((name, content))
