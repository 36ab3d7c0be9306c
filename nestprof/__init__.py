"""nestprof - hierarchical execution-time profiler with per-context timing trees."""

__version__ = "0.1.0"

from nestprof.config import ProfilerConfig
from nestprof.entry import Entry, monotonic_ms
from nestprof.exceptions import (
    NestprofError,
    ProfilerStateError,
    ScriptLoadError,
    ValidationError,
)
from nestprof.labels import DetailedLabel, Label, LabelLevel
from nestprof.profiler import (
    Profiler,
    default_profiler,
    dump,
    enter,
    get_duration,
    get_entry,
    release,
    reset,
    start,
)
from nestprof.sections import profile, profiled

__all__ = [
    "Entry",
    "Profiler",
    "ProfilerConfig",
    "default_profiler",
    "start",
    "reset",
    "enter",
    "release",
    "get_duration",
    "get_entry",
    "dump",
    "profile",
    "profiled",
    "monotonic_ms",
    "Label",
    "LabelLevel",
    "DetailedLabel",
    "NestprofError",
    "ProfilerStateError",
    "ScriptLoadError",
    "ValidationError",
]
