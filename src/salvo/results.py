"""Explicit success/failure values returned by every fallible game operation.

Rule violations (attacking a cell twice, placing a ship off the board, firing
out of turn) are ordinary outcomes, so they travel back to the caller as data
rather than as exceptions. A failing `Result` carries the error code of the
layer that produced it and, when that layer re-mapped a lower-level error, the
original code as ``cause``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Result(Generic[T, E]):
    value: Optional[T] = None
    error: Optional[E] = None
    cause: Any = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def __bool__(self) -> bool:
        return self.ok

    def unwrap(self) -> T:
        """Return the value, raising ``ValueError`` if this is a failure."""
        if self.error is not None:
            raise ValueError(f"unwrap() on failed result: {self.error!r}")
        return self.value  # type: ignore[return-value]


def success(value: Any = None) -> Result:
    return Result(value=value)


def failure(error: Any, *, cause: Any = None) -> Result:
    return Result(error=error, cause=cause)
