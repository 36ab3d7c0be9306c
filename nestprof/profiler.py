"""Per-context profiler facade.

Usage:
    from nestprof import profiler

    profiler.start("request")
    profiler.enter("load")
    ...
    profiler.release()
    profiler.release()
    print(profiler.dump())

Each thread and each asyncio task has its own tree. A tree must only be driven
from the context that owns it; no locking is done on entries.
"""

from __future__ import annotations

from contextvars import ContextVar
from itertools import count

from nestprof.config import ProfilerConfig
from nestprof.constants import UNKNOWN
from nestprof.entry import Clock, Entry, monotonic_ms
from nestprof.exceptions import ProfilerStateError
from nestprof.labels import LabelLike
from nestprof.logging import get_logger

logger = get_logger(__name__)

_ids = count(1)

__all__ = [
    "Profiler",
    "default_profiler",
    "dump",
    "enter",
    "get_duration",
    "get_entry",
    "monotonic_ms",
    "release",
    "reset",
    "start",
]


class Profiler:
    """Owns one timing tree per execution context."""

    def __init__(self, config: ProfilerConfig | None = None, *, clock: Clock | None = None) -> None:
        self.config = config or ProfilerConfig()
        self.config.validate()
        self.clock: Clock = clock or self.config.clock or monotonic_ms
        self._root: ContextVar[Entry | None] = ContextVar(f"nestprof_root_{next(_ids)}", default=None)

    def start(self, label: LabelLike = None) -> Entry | None:
        """Begin a new session, discarding any tree this context already had."""
        if not self.config.enabled:
            return None
        root = Entry(label, clock=self.clock)
        self._root.set(root)
        logger.debug("profile_session_started", label=_label_for_log(label))
        return root

    def reset(self) -> None:
        """Drop this context's tree."""
        self._root.set(None)
        logger.debug("profile_session_reset")

    def enter(self, label: LabelLike = None) -> Entry | None:
        """Open a child region under the current entry."""
        if not self.config.enabled:
            return None
        current = self.current_entry()
        if current is None:
            self._ignored("enter", "no active session")
            return None
        if current.is_released() and self.config.strict:
            # Only the root can be current while released.
            raise ProfilerStateError("enter called after the session was released")
        return current.enter_child(label)

    def release(self) -> None:
        """Close the deepest open region."""
        if not self.config.enabled:
            return
        current = self.current_entry()
        if current is None:
            self._ignored("release", "no active session")
            return
        if current.is_released() and self.config.strict:
            raise ProfilerStateError("release called but every entry is already released")
        self.release_entry(current)

    def release_entry(self, entry: Entry) -> None:
        """Release a specific entry, regardless of which entry is current."""
        entry.release()
        if entry.parent is None:
            self._check_threshold(entry)

    def get_duration(self) -> int:
        """Total duration of this context's session, or -1 without one."""
        root = self._root.get()
        return root.duration() if root is not None else UNKNOWN

    def get_entry(self) -> Entry | None:
        """Root entry of this context's session."""
        return self._root.get()

    def current_entry(self) -> Entry | None:
        """Deepest entry still open, found by descending from the root."""
        entry = self._root.get()
        if entry is None:
            return None
        child = entry.find_unreleased_child()
        while child is not None:
            entry = child
            child = entry.find_unreleased_child()
        return entry

    def dump(self, first_prefix: str = "", continuation_prefix: str | None = None) -> str:
        """Render this context's tree, or return "" without a session."""
        root = self._root.get()
        if root is None:
            return ""
        if continuation_prefix is None:
            continuation_prefix = first_prefix
        return root.render(first_prefix, continuation_prefix)

    def _ignored(self, operation: str, reason: str) -> None:
        if self.config.strict:
            raise ProfilerStateError(f"{operation} called with {reason}")
        logger.debug("profile_operation_ignored", operation=operation, reason=reason)

    def _check_threshold(self, root: Entry) -> None:
        threshold = self.config.threshold_ms
        duration = root.duration()
        if threshold > 0 and duration >= threshold:
            logger.warning(
                "profile_threshold_exceeded",
                duration_ms=duration,
                threshold_ms=threshold,
                profile=root.render(),
            )


def _label_for_log(label: LabelLike) -> str | None:
    # Label objects are only resolved when rendering.
    if label is None or isinstance(label, str):
        return label
    return repr(label)


default_profiler = Profiler()

start = default_profiler.start
reset = default_profiler.reset
enter = default_profiler.enter
release = default_profiler.release
get_duration = default_profiler.get_duration
get_entry = default_profiler.get_entry
dump = default_profiler.dump
