"""Structured logging for the report pipeline, built on structlog.

Console output in development, one JSON object per line otherwise. Events
are snake_case names with keyword context, e.g.::

    logger.info("report_exported", report_type="trial-balance", format="pdf")

Anything bound through ``LogContext`` (report type, request id) is merged
into every event emitted while it is bound.
"""

import logging
import sys
from collections.abc import Mapping
from decimal import Decimal
from pathlib import Path
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from ledger_reports.config import Settings, get_settings

# Libraries that log every request or glyph at DEBUG
_CHATTY_LOGGERS = ("httpcore", "httpx", "uvicorn.access", "nicegui", "reportlab", "asyncio")


def _app_context(settings: Settings) -> Processor:
    app = settings.app_name
    environment = settings.environment.value

    def processor(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("app", app)
        event_dict.setdefault("environment", environment)
        return event_dict

    return processor


def _plain_values(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Render Decimal amounts (also inside summary mappings) as strings."""
    for key, value in event_dict.items():
        if isinstance(value, Decimal):
            event_dict[key] = str(value)
        elif isinstance(value, Mapping):
            event_dict[key] = {
                k: str(v) if isinstance(v, Decimal) else v for k, v in value.items()
            }
    return event_dict


def _base_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]


def build_processors(settings: Settings) -> list[Processor]:
    """Processor chain for the configured log format."""
    processors = _base_processors()
    if settings.resolved_log_format == "json":
        processors += [
            _app_context(settings),
            _plain_values,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stdout.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )
    return processors


def configure_logging(settings: Settings | None = None) -> None:
    """Route structlog through stdlib logging at the configured level.

    Called once by the CLI and UI entry points. Library code only calls
    ``get_logger``.
    """
    settings = settings or get_settings()
    level = logging.getLevelName(settings.log_level.value)

    structlog.configure(
        processors=build_processors(settings),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    if settings.log_file:
        _add_file_handler(settings.log_file, level)

    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))


def _add_file_handler(log_file: Path, level: int) -> None:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    logging.getLogger().addHandler(handler)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.stdlib.get_logger(name)


class LogContext:
    """Bind log context for the duration of a ``with`` block.

    Values that were already bound are restored on exit, so contexts nest::

        with LogContext(report_type="cash-flow", request_id=7):
            logger.info("report_fetch_started")
    """

    def __init__(self, **kwargs: Any) -> None:
        self.kwargs = kwargs
        self._tokens: Mapping[str, Any] = {}

    def __enter__(self) -> "LogContext":
        self._tokens = structlog.contextvars.bind_contextvars(**self.kwargs)
        return self

    def __exit__(self, *args: Any) -> None:
        structlog.contextvars.reset_contextvars(**self._tokens)
