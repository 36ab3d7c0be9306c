"""Structured JSON logging for nestprof.

The profiler core only obtains loggers through get_logger and never configures
handlers itself, so embedding applications keep control of their logging.
configure_logging_json is called by the CLI at startup.

Each record is one JSON object with ``event``, ``level``, ``timestamp`` and
``service`` plus the event's own keys (``duration_ms``, ``profile``, ...).
"""

from __future__ import annotations

import json
import logging
import sys
import traceback
from collections.abc import Callable, MutableMapping
from typing import Any

import structlog

JsonDict = MutableMapping[str, Any]
Processor = Callable[[Any, str, JsonDict], JsonDict]

# Records at ERROR and above go to stderr only.
_STDOUT_MAX_LEVEL = logging.ERROR - 1


def _flatten_exc_info(event_dict: JsonDict) -> JsonDict:
    exc_info = event_dict.pop("exc_info", None)
    if exc_info is True:
        exc_info = sys.exc_info()
    if exc_info and exc_info[0]:
        event_dict["error_type"] = exc_info[0].__name__
        event_dict["error_message"] = str(exc_info[1])
        event_dict["stack_trace"] = "".join(traceback.format_exception(*exc_info))
    return event_dict


def _json_renderer(service: str, timestamper: Processor) -> Callable[[Any, str, JsonDict], str]:
    def render(logger: Any, method_name: str, event_dict: JsonDict) -> str:  # noqa: ANN401
        event_dict = timestamper(logger, method_name, event_dict)
        event_dict.setdefault("service", service)
        event_dict = _flatten_exc_info(event_dict)
        event_dict["level"] = str(event_dict.get("level", method_name)).upper()
        return json.dumps(event_dict, ensure_ascii=True, separators=(",", ":"), default=str)

    return render


def configure_logging_json(level: str | int = "INFO", service: str = "nestprof") -> None:
    """
    Route structlog and stdlib records as JSON lines to stdout/stderr.

    Only call this at process boundaries (the CLI does it before running a script).
    """

    logging_level = logging.getLevelName(level.upper()) if isinstance(level, str) else level

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=_json_renderer(service, structlog.processors.TimeStamper(fmt="iso", key="timestamp")),
        foreign_pre_chain=[structlog.stdlib.add_log_level],
    )

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(logging_level)
    stdout_handler.addFilter(lambda record: record.levelno <= _STDOUT_MAX_LEVEL)
    stdout_handler.setFormatter(formatter)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.ERROR)
    stderr_handler.setFormatter(formatter)

    logging.basicConfig(level=logging_level, handlers=[stdout_handler, stderr_handler], force=True)

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(logging_level),
        # Tests reconfigure between cases.
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a named structlog logger without configuring global handlers."""

    return structlog.get_logger(name or "nestprof")


def reset_logging_for_tests() -> None:
    """Reset structlog and stdlib logging state (used in tests)."""

    structlog.reset_defaults()
    logging.basicConfig(level=logging.NOTSET, handlers=[], force=True)
