"""
Result envelope for the embedding API.

Internals raise typed :mod:`~dbupdater.core.errors`; the public entry points
(:meth:`Reconciler.run`, :meth:`Reconciler.plan`) return ``Ok[T]`` or
``Err[T]`` so callers handle the failure path explicitly.

Examples:
    >>> from dbupdater.core.result import Ok, Err
    >>> match Ok(3):
    ...     case Ok(value):
    ...         print(value)
    ...     case Err(error):
    ...         print(error)
    3
    >>> Err(ValueError("boom")).unwrap_or(0)
    0

Tags:
    result-pattern, error-handling, dbupdater
"""

from __future__ import annotations

from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from dbupdater.core.errors import UpdaterError


T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful result holding ``value``."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Get the value. Safe for Ok."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, f: Callable[[T], U]) -> Result[U]:
        """Transform the value if Ok."""
        return Ok(f(self.value))

    def map_err(self, f: Callable[[Exception], Exception]) -> Result[T]:
        return self

    def inspect_err(self, f: Callable[[Exception], None]) -> Result[T]:
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        value = self.value.to_dict() if hasattr(self.value, "to_dict") else self.value
        return {"ok": True, "value": value}

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """Failed result holding ``error``."""

    error: Exception

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Raise the error. Use only when you're sure it's Ok."""
        raise self.error

    def unwrap_or(self, default: T) -> T:
        return default

    def map(self, f: Callable[[T], U]) -> Result[U]:
        """No-op for Err."""
        return Err(self.error)

    def map_err(self, f: Callable[[Exception], Exception]) -> Result[T]:
        """Transform the error."""
        return Err(f(self.error))

    def inspect_err(self, f: Callable[[Exception], None]) -> Result[T]:
        """Call f with error for side effects, return self."""
        f(self.error)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        if isinstance(self.error, UpdaterError):
            return {"ok": False, "error": self.error.to_dict()}
        return {
            "ok": False,
            "error": {
                "error_type": type(self.error).__name__,
                "message": str(self.error),
            },
        }

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Ok[T] | Err[T]


async def try_result_async(f: Callable[[], Awaitable[T]]) -> Result[T]:
    """Await ``f()`` and wrap its return value or raised exception.

    Only ``Exception`` subclasses become ``Err``; ``asyncio.CancelledError``
    and ``KeyboardInterrupt`` propagate.
    """
    try:
        return Ok(await f())
    except Exception as e:
        return Err(e)


__all__ = ["Ok", "Err", "Result", "try_result_async"]
