"""Task sources - where tasks are discovered and their content read."""

from dbupdater.sources.filesystem import FileTaskSource
from dbupdater.sources.memory import InMemoryTaskSource

__all__ = ["FileTaskSource", "InMemoryTaskSource"]
