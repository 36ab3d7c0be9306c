"""Custom exceptions for the nestprof package."""


class NestprofError(Exception):
    """Base exception for nestprof errors."""

    pass


class ProfilerStateError(NestprofError):
    """Raised in strict mode when enter/release do not match an open session."""

    pass


class ValidationError(NestprofError):
    """Raised when configuration validation fails."""

    pass


class ScriptLoadError(NestprofError):
    """Raised when a script to be profiled cannot be found or read."""

    pass
