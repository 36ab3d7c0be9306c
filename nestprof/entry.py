"""Timing tree entries.

An ``Entry`` is one timed region. Entries only store raw timestamps; every
derived figure (duration, self time, percentages) is recomputed on demand so
the result never depends on the order in which the tree was inspected.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterator

from nestprof.constants import (
    BRANCH_CONNECTOR,
    BRANCH_CONTINUATION,
    CORNER_CONNECTOR,
    CORNER_CONTINUATION,
    UNKNOWN,
    UNRELEASED_MARKER,
)
from nestprof.labels import LabelLike, resolve_label

Clock = Callable[[], int]


def monotonic_ms() -> int:
    """Monotonic clock in whole milliseconds."""
    return time.monotonic_ns() // 1_000_000


class Entry:
    """One node of the timing tree."""

    def __init__(
        self,
        label: LabelLike = None,
        parent: Entry | None = None,
        root: Entry | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.label = label
        self.parent = parent
        self.root: Entry = root if root is not None else self
        # A tree has exactly one clock: the root's.
        self.clock: Clock = root.clock if root is not None else (clock or monotonic_ms)
        self._children: list[Entry] = []
        self.start_time: int = self.clock()
        self.end_time: int | None = None
        self.base_time: int = root.start_time if root is not None else 0

    @property
    def children(self) -> tuple[Entry, ...]:
        """Direct children in the order they were entered."""
        return tuple(self._children)

    def enter_child(self, label: LabelLike = None) -> Entry:
        child = Entry(label, parent=self, root=self.root)
        self._children.append(child)
        return child

    def release(self) -> None:
        self.end_time = self.clock()

    def is_released(self) -> bool:
        return self.end_time is not None

    def find_unreleased_child(self) -> Entry | None:
        """Return the most recently entered child if it is still open."""
        if not self._children:
            return None
        last = self._children[-1]
        return None if last.is_released() else last

    # ---------------------------------------------------------------- metrics

    def relative_start(self) -> int:
        """Start time relative to the root's start (0 for the root)."""
        if self.base_time > 0:
            return self.start_time - self.base_time
        return 0

    def relative_end(self) -> int:
        """End time relative to the root's start, or -1 if not released."""
        if self.end_time is None or self.end_time < self.base_time:
            return UNKNOWN
        return self.end_time - self.base_time

    def duration(self) -> int:
        """Elapsed milliseconds, or -1 if not released."""
        if self.end_time is None or self.end_time < self.start_time:
            return UNKNOWN
        return self.end_time - self.start_time

    def self_duration(self) -> int:
        """
        Duration minus the durations of the direct children.

        Children that are still open count as 0 rather than subtracting their
        -1 sentinel. Returns -1 when the entry is open or when the children add
        up to more than the entry itself (inconsistent timings).
        """
        remaining = self.duration()
        if remaining < 0:
            return UNKNOWN
        for child in self._children:
            # Open children have no duration yet.
            remaining -= max(child.duration(), 0)
        return remaining if remaining >= 0 else UNKNOWN

    def percentage_of_parent(self) -> float:
        """Fraction of the parent's duration spent in this entry."""
        if self.parent is None or not self.parent.is_released():
            return 0.0
        return _ratio(self.duration(), self.parent.duration())

    def percentage_of_total(self) -> float:
        """Fraction of the root's duration spent in this entry (0 for the root)."""
        if self.parent is None or not self.root.is_released():
            return 0.0
        return _ratio(self.duration(), self.root.duration())

    # -------------------------------------------------------------- rendering

    def message(self) -> str | None:
        """Resolve the display label for the entry's current state."""
        return resolve_label(self.label, self, self.is_released())

    def walk(self, depth: int = 0) -> Iterator[tuple[int, Entry]]:
        """Yield ``(depth, entry)`` pairs for the subtree in pre-order."""
        stack = [(depth, self)]
        while stack:
            level, entry = stack.pop()
            yield level, entry
            stack.extend((level + 1, child) for child in reversed(entry._children))

    def render(self, first_prefix: str = "", continuation_prefix: str = "") -> str:
        """
        Render the subtree as text, one line per entry.

        ``first_prefix`` starts the first line; ``continuation_prefix`` starts
        every following line.
        """
        lines: list[str] = []
        stack = [(self, first_prefix, continuation_prefix)]
        while stack:
            entry, first, rest = stack.pop()
            lines.append(first + entry._format_line())

            # Pushed last-to-first so the first child is rendered next.
            last_index = len(entry._children) - 1
            for index in range(last_index, -1, -1):
                child = entry._children[index]
                if index == last_index:
                    stack.append((child, rest + CORNER_CONNECTOR, rest + CORNER_CONTINUATION))
                else:
                    stack.append((child, rest + BRANCH_CONNECTOR, rest + BRANCH_CONTINUATION))
        return "\n".join(lines)

    def _format_line(self) -> str:
        released = self.is_released()
        line = f"{self.relative_start():,} "

        if released:
            duration = self.duration()
            own = self.self_duration()
            of_parent = self.percentage_of_parent()
            of_total = self.percentage_of_total()

            line += f"[{duration:,}ms"
            if own > 0 and own != duration:
                line += f" ({own:,}ms)"
            if of_parent > 0:
                line += f", {of_parent:.0%}"
            if of_total > 0:
                line += f", {of_total:.0%}"
            line += "]"
        else:
            line += UNRELEASED_MARKER

        message = resolve_label(self.label, self, released)
        if message is not None:
            line += f" - {message}"
        return line

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return (
            f"Entry(label={self.label!r}, start_time={self.start_time}, "
            f"end_time={self.end_time}, children={len(self._children)})"
        )


def _ratio(duration: int, whole: int) -> float:
    if duration > 0 and whole > 0:
        return duration / whole
    return 0.0
