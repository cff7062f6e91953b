"""Logging configuration helpers built on the standard library and Structlog.

Key Responsibilities:
    - Configure standard library logging with single line JSON formatting
    - Configure Structlog so ``structlog.get_logger(__name__)`` loggers used
      throughout the runtime render consistently

Collaborators:
    - Upstream: Applications embedding the model call :func:`configure_logging`
      once during startup
    - Downstream: Relies on ``logging`` and ``structlog``

Side Effects:
    - Configures global logging handlers and the Structlog default pipeline

Thread Safety:
    - Logging configuration should be invoked once during process startup
"""

# ==============================================================================
# IMPORTS
# ==============================================================================

from __future__ import annotations

import json
import logging
import sys
from typing import Any

import structlog

from Medical_FHIR_model.config.settings import LoggingSettings

_RESERVED_RECORD_KEYS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)

# ==============================================================================
# FORMATTERS
# ==============================================================================


class JsonFormatter(logging.Formatter):
    """Formats log records as single line JSON objects."""

    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S%z")

    def format(self, record: logging.LogRecord) -> str:
        """Serialise a log record into a JSON string."""
        payload: dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "time": self.formatTime(record, self.datefmt),
        }
        for key, value in record.__dict__.items():
            if key in _RESERVED_RECORD_KEYS:
                continue
            payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, sort_keys=True, default=str)


# ==============================================================================
# CONFIGURATION HELPERS
# ==============================================================================


def _resolve_level(level: int | str | None) -> int:
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        return resolved if isinstance(resolved, int) else logging.INFO
    if isinstance(level, int):
        return level
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    settings: LoggingSettings | None = None,
) -> None:
    """Configure global logging for the model runtime.

    Args:
        level: Optional logging level or level name. When ``settings`` is
            provided this argument is ignored.
        settings: Optional logging settings providing the level and renderer.

    Note:
        Calling this function reconfigures the root logger and should therefore
        happen once during application startup.
    """
    render_json = True
    if settings is not None:
        level = settings.level
        render_json = settings.json_output
    level_value = _resolve_level(level)

    handler = logging.StreamHandler(sys.stdout)
    if render_json:
        handler.setFormatter(JsonFormatter())

    root_logger = logging.getLogger()
    preserved_handlers: list[logging.Handler] = []
    for existing in root_logger.handlers:
        module_attr = getattr(existing.__class__, "__module__", "")
        module: str = module_attr if isinstance(module_attr, str) else ""
        if module.startswith("_pytest."):
            preserved_handlers.append(existing)

    logging.basicConfig(
        level=level_value,
        handlers=[*preserved_handlers, handler],
        force=True,
    )

    renderer: Any = (
        structlog.processors.JSONRenderer(sort_keys=True)
        if render_json
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level_value),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> Any:
    """Return a Structlog logger bound to ``name``."""
    return structlog.get_logger(name)


__all__ = ["JsonFormatter", "configure_logging", "get_logger"]
