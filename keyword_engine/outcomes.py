"""Result-style values for sub-operations that must not abort the run.

A page fetch or a single enrichment call either produces a value or an
error; callers fold over a list of :class:`Outcome` instead of relying on
exceptions being swallowed somewhere deeper.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Iterable, List, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Value-or-error of one isolated operation."""

    label: str
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, label: str, value: T) -> "Outcome[T]":
        return cls(label=label, value=value)

    @classmethod
    def failure(cls, label: str, error: BaseException) -> "Outcome[T]":
        return cls(label=label, error=error)

    def value_or(self, default: T) -> T:
        if self.ok and self.value is not None:
            return self.value
        return default


def successes(outcomes: Iterable[Outcome[T]]) -> List[T]:
    """Return the values of every successful outcome, in order."""
    return [o.value for o in outcomes if o.ok and o.value is not None]


def failures(outcomes: Iterable[Outcome[T]]) -> List[Outcome[T]]:
    return [o for o in outcomes if not o.ok]


async def capture(label: str, call: Callable[[], Awaitable[T]]) -> Outcome[T]:
    """Await *call* and wrap its result (or exception) in an :class:`Outcome`."""
    try:
        return Outcome.success(label, await call())
    except Exception as exc:  # noqa: BLE001 - folded by the caller
        return Outcome.failure(label, exc)
