from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from nestprof.config import ProfilerConfig


@dataclass
class AppContext:
    """
    CLI execution context. Created once at CLI entry point.
    The profiler core does not create or depend on this.
    """

    mode: Literal["normal", "quiet"]
    verbose: bool
    config: ProfilerConfig

    @classmethod
    def create(
        cls,
        *,
        quiet: bool = False,
        verbose: bool = False,
        config: ProfilerConfig | None = None,
    ) -> AppContext:
        """
        Factory method to create AppContext.
        Quiet overrides verbose.
        """
        mode = "quiet" if quiet else "normal"
        return cls(
            mode=mode,
            verbose=verbose and not quiet,
            config=config or ProfilerConfig(),
        )

    @property
    def log_level(self) -> str:
        if self.verbose:
            return "DEBUG"
        return "ERROR" if self.mode == "quiet" else "WARNING"


def map_exception_to_exit_code(exc: Exception) -> int:
    """
    Map exceptions to CLI exit codes.
    Centralized mapping for consistent behavior.
    """
    from nestprof.constants import (
        EXIT_GENERAL_ERROR,
        EXIT_INVALID_INPUT,
        EXIT_IO_ERROR,
    )
    from nestprof.exceptions import ProfilerStateError, ScriptLoadError, ValidationError

    if isinstance(exc, (FileNotFoundError, IsADirectoryError)):
        return EXIT_IO_ERROR
    if isinstance(exc, ScriptLoadError):
        return EXIT_IO_ERROR
    if isinstance(exc, (ValidationError, ProfilerStateError)):
        return EXIT_INVALID_INPUT
    return EXIT_GENERAL_ERROR
