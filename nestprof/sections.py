"""Scoped profiling helpers.

Usage:
    from nestprof import profile, profiled

    with profiled("load_data"):
        data = load()

    @profile
    def train(): ...

    @profile("custom_name")
    def other(): ...
"""

from __future__ import annotations

import functools
import inspect
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TypeVar, overload

from nestprof.entry import Entry
from nestprof.labels import LabelLike
from nestprof.profiler import Profiler, default_profiler

F = TypeVar("F", bound=Callable)


@contextmanager
def profiled(label: LabelLike = None, profiler: Profiler | None = None) -> Iterator[Entry | None]:
    """
    Time the enclosed block as one entry.

    Starts a new session when the context has none open; otherwise the block
    becomes a child of the current entry. The entry is released even if the
    block raises.
    """
    prof = profiler or default_profiler
    root = prof.get_entry()
    if root is None or root.is_released():
        entry = prof.start(label)
    else:
        entry = prof.enter(label)

    try:
        yield entry
    finally:
        if entry is not None:
            prof.release_entry(entry)


@overload
def profile(func: F) -> F: ...


@overload
def profile(label: str | None = None, *, profiler: Profiler | None = None) -> Callable[[F], F]: ...


def profile(func_or_label=None, *, profiler=None):
    """Decorator timing each call of the wrapped function.

    Can be used as ``@profile``, ``@profile()`` or ``@profile("label")``.
    The label defaults to the function's qualified name. Coroutine functions
    are timed until the awaited call completes.
    """

    def make_wrapper(func: F, label: str) -> F:
        if inspect.iscoroutinefunction(func):
            # Time the awaited body, not just coroutine creation.
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                with profiled(label, profiler):
                    return await func(*args, **kwargs)

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with profiled(label, profiler):
                return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    if callable(func_or_label):
        return make_wrapper(func_or_label, func_or_label.__qualname__)

    def decorator(func: F) -> F:
        return make_wrapper(func, func_or_label or func.__qualname__)

    return decorator
