"""
Filesystem task source.

Every regular file in the tasks directory is a task; the file name is the
task name and the MD5 of the file bytes is its fingerprint. Tasks are
returned sorted by file name, so ``001_…``, ``002_…`` prefixes define the
execution order.

Files are read concurrently while fingerprinting (bounded by
``read_concurrency``); the returned list is sorted regardless of the order
reads complete in.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from dbupdater.core.errors import ConfigurationError, SourceReadError
from dbupdater.core.hashing import compute_fingerprint
from dbupdater.core.logging import get_logger
from dbupdater.core.models import Task

DEFAULT_TASKS_DIR = "tasks"
DEFAULT_READ_CONCURRENCY = 5


class FileTaskSource:
    """Discovers tasks as files in a directory.

    Parameters
    ----------
    path
        Tasks directory; created by :meth:`init` if missing.
    read_concurrency
        Maximum number of files read at the same time by :meth:`list_tasks`.
    logger
        Injected structured logger.
    """

    def __init__(
        self,
        path: str | Path = DEFAULT_TASKS_DIR,
        *,
        read_concurrency: int = DEFAULT_READ_CONCURRENCY,
        logger: Any = None,
    ) -> None:
        if read_concurrency < 1:
            raise ConfigurationError("read_concurrency must be at least 1", key="read_concurrency")
        self.path = Path(path)
        self.read_concurrency = read_concurrency
        self._logger = logger or get_logger(__name__)

    def __repr__(self) -> str:
        return f"FileTaskSource({str(self.path)!r})"

    async def init(self) -> None:
        """Create the tasks directory if absent; fail if the path is not a directory."""
        if not self.path.exists():
            await asyncio.to_thread(self.path.mkdir, parents=True, exist_ok=True)
            self._logger.info("source.file.dir_created", path=str(self.path))
        elif not self.path.is_dir():
            raise SourceReadError(
                None,
                message=f'Tasks dir "{self.path}" must be a directory',
            ).with_context(backend=str(self.path))
        else:
            self._logger.debug("source.file.dir_found", path=str(self.path))

    async def list_tasks(self) -> list[Task]:
        """Fingerprint every file, returning tasks sorted by file name."""
        files = await asyncio.to_thread(self._list_files)
        semaphore = asyncio.Semaphore(self.read_concurrency)

        async def _fingerprint(file: Path) -> Task:
            async with semaphore:
                data = await asyncio.to_thread(file.read_bytes)
            return Task(name=file.name, fingerprint=compute_fingerprint(data))

        # gather keeps input order, so the result stays sorted
        tasks = list(await asyncio.gather(*(_fingerprint(f) for f in files)))
        self._logger.debug("source.file.tasks_listed", path=str(self.path), count=len(tasks))
        return tasks

    async def get_content(self, task: Task) -> str:
        """Return the UTF-8 text of the task's file."""
        data = await asyncio.to_thread(self.resolve(task).read_bytes)
        return data.decode("utf-8")

    def resolve(self, task: Task) -> Path:
        """Absolute path of the file backing ``task``."""
        return (self.path / task.name).resolve()

    def _list_files(self) -> list[Path]:
        # runs in a worker thread; is_file() stats every entry
        return sorted((p for p in self.path.iterdir() if p.is_file()), key=lambda p: p.name)


__all__ = ["FileTaskSource", "DEFAULT_TASKS_DIR", "DEFAULT_READ_CONCURRENCY"]
