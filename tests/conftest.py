from __future__ import annotations

import pytest

from nestprof.logging import reset_logging_for_tests
from nestprof.profiler import default_profiler


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: int = 1000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(autouse=True)
def clean_state():
    reset_logging_for_tests()
    default_profiler.reset()
    yield
    default_profiler.reset()
    reset_logging_for_tests()
