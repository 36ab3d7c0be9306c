"""Entry labels.

An entry label is either plain text or an object implementing the ``Label``
protocol, which lets the caller show a short label while the entry is open and
choose between a brief and a detailed label once it has been released.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol, Union, runtime_checkable

if TYPE_CHECKING:
    from nestprof.entry import Entry


class LabelLevel(Enum):
    """Which text a label should display."""

    NONE = "none"
    BRIEF = "brief"
    DETAILED = "detailed"


@runtime_checkable
class Label(Protocol):
    """Deferred label source consulted every time an entry is rendered."""

    def level(self, entry: Entry) -> LabelLevel: ...

    def brief(self) -> str | None: ...

    def detailed(self) -> str | None: ...


LabelLike = Union[str, Label, None]


class DetailedLabel:
    """
    Label that switches to its detailed text for slow entries.

    The detailed text is shown once the released entry took at least
    ``threshold_ms`` milliseconds.
    """

    def __init__(self, brief: str, detailed: str, threshold_ms: int = 0) -> None:
        self._brief = brief
        self._detailed = detailed
        self.threshold_ms = threshold_ms

    def level(self, entry: Entry) -> LabelLevel:
        if entry.duration() >= self.threshold_ms:
            return LabelLevel.DETAILED
        return LabelLevel.BRIEF

    def brief(self) -> str | None:
        return self._brief

    def detailed(self) -> str | None:
        return self._detailed

    def __repr__(self) -> str:
        return f"DetailedLabel({self._brief!r}, {self._detailed!r}, threshold_ms={self.threshold_ms})"


def resolve_label(label: Any, entry: Entry, released: bool) -> str | None:
    """
    Return the display text for ``label`` on ``entry``.

    Open entries always use the brief text. Empty text resolves to None.
    """
    if label is None:
        return None

    if isinstance(label, str):
        text: str | None = label
    elif isinstance(label, Label):
        level = label.level(entry) if released else LabelLevel.BRIEF
        text = label.detailed() if level is LabelLevel.DETAILED else label.brief()
    else:
        text = str(label)

    return text or None
