"""Shared pytest fixtures (kept at the repository root so packages import without install)."""
from __future__ import annotations

import pytest

from keyword_engine.cache import MemoryStorage

T0 = 1_760_000_000_000  # 2025-10-09T08:53:20Z


class FakeClock:
    """Epoch-millisecond clock advanced by hand."""

    def __init__(self, now: int = T0):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class SleepRecorder:
    """Stand-in for ``asyncio.sleep`` that records delays instead of waiting."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def sleep() -> SleepRecorder:
    return SleepRecorder()
