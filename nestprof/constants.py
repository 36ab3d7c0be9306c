"""Constants used throughout the nestprof package."""

# Sentinel returned for durations and relative times that are not known yet
UNKNOWN = -1

# Rendering
UNRELEASED_MARKER = "[UNRELEASED]"
BRANCH_CONNECTOR = "+---"
BRANCH_CONTINUATION = "|   "
CORNER_CONNECTOR = "`---"
CORNER_CONTINUATION = "    "

# Default profiler configuration values
DEFAULT_ENABLED = True
DEFAULT_STRICT = False
DEFAULT_THRESHOLD_MS = 0

# Environment variable prefix for CLI configuration
ENV_PREFIX = "NESTPROF_"

# CLI exit codes
EXIT_SUCCESS = 0
EXIT_GENERAL_ERROR = 1
EXIT_INVALID_INPUT = 2
EXIT_IO_ERROR = 3
