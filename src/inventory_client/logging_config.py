"""Structured logging configuration using structlog.

Logs always go to stderr: stdout belongs to command output (results,
--json payloads, operation lists) and must stay machine-readable.

Production renders one JSON object per line; development renders the
console format, coloured only when stderr is a terminal.
"""

import logging
import sys
from typing import Optional, TextIO

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

# Libraries whose INFO output is per-request noise for a CLI
NOISY_LOGGERS = ("httpx", "httpcore", "asyncio")


def add_app_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add application context to all log events."""
    event_dict["app"] = "inventory-client"
    return event_dict


def _renderer(is_production: bool, stream: TextIO) -> Processor:
    if is_production:
        return structlog.processors.JSONRenderer(ensure_ascii=False)
    isatty = getattr(stream, "isatty", None)
    return structlog.dev.ConsoleRenderer(colors=bool(isatty and isatty()))


def configure_logging(
    log_level: str = "INFO",
    environment: str = "development",
    stream: Optional[TextIO] = None,
) -> None:
    """Configure structlog on top of stdlib logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        environment: Environment name (development, production)
        stream: Destination for log lines (defaults to sys.stderr)

    At DEBUG level the httpx/httpcore request logs are let through too;
    otherwise they are held at WARNING.
    """
    log_level_int = getattr(logging, log_level.upper(), logging.INFO)
    is_production = environment.lower() == "production"
    stream = stream if stream is not None else sys.stderr

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
    ]
    if is_production:
        shared_processors.append(structlog.processors.format_exc_info)

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_renderer(is_production, stream),
            foreign_pre_chain=shared_processors,
        )
    )
    handler.setLevel(log_level_int)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level_int)

    library_level = logging.DEBUG if log_level_int <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    structlog.get_logger(__name__).debug(
        "Logging configured",
        log_level=log_level,
        environment=environment,
        renderer="json" if is_production else "console",
    )
