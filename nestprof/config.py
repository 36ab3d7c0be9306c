"""Configuration settings for the nestprof package."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from nestprof.constants import DEFAULT_ENABLED, DEFAULT_STRICT, DEFAULT_THRESHOLD_MS


@dataclass
class ProfilerConfig:
    """
    Configuration for a Profiler.

    This is a core dataclass used by the profiler facade.
    CLI layer should use CLIConfig (Pydantic) and convert to this.
    """

    enabled: bool = DEFAULT_ENABLED
    strict: bool = DEFAULT_STRICT
    threshold_ms: int = DEFAULT_THRESHOLD_MS
    clock: Callable[[], int] | None = None

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValidationError: If any configuration value is invalid
        """
        from nestprof.exceptions import ValidationError

        if isinstance(self.threshold_ms, bool) or not isinstance(self.threshold_ms, int):
            raise ValidationError(
                f"threshold_ms must be an integer number of milliseconds, got {self.threshold_ms!r}"
            )
        if self.threshold_ms < 0:
            raise ValidationError(f"Invalid threshold_ms: {self.threshold_ms}. Must be >= 0")

        if self.clock is not None and not callable(self.clock):
            raise ValidationError("clock must be a zero-argument callable returning milliseconds")
