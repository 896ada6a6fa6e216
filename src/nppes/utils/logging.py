"""Structured logging for ingestion and analytics, built on structlog."""

import logging
import sys
from typing import TYPE_CHECKING, Any, TextIO

import structlog

if TYPE_CHECKING:
    from nppes.config.settings import LoggingConfig


def _processors(json_output: bool, stream: TextIO) -> list[structlog.types.Processor]:
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if json_output:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        isatty = getattr(stream, "isatty", None)
        processors.append(structlog.dev.ConsoleRenderer(colors=bool(isatty and isatty())))
    return processors


def configure_logging(
    config: "LoggingConfig | None" = None,
    *,
    level: str = "INFO",
    json_output: bool = False,
    stream: TextIO | None = None,
) -> None:
    """
    Configure structlog for the process.

    Events go to stderr by default so that CLI tables and exported data on
    stdout stay clean. Standard library loggers share the level.

    Args:
        config: Logging configuration; takes precedence over ``level`` and
            ``json_output``.
        level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_output: Render one JSON object per event instead of console text.
        stream: Output stream (defaults to sys.stderr).
    """
    if config is not None:
        level, json_output = config.level, config.json_output
    out = stream if stream is not None else sys.stderr
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    logging.basicConfig(format="%(message)s", stream=out, level=log_level)

    structlog.configure(
        processors=_processors(json_output, out),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=out),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger, conventionally named after the module."""
    return structlog.get_logger(name)


def log_context(**kwargs: Any) -> structlog.contextvars.bound_contextvars:
    """
    Bind key/value pairs to every event logged inside the block.

    Example:
        with log_context(path="npidata_pfile.csv", schema="npi_main"):
            log.info("Loading file")  # carries path and schema

    Args:
        **kwargs: Values to bind.

    Returns:
        Context manager that binds and unbinds the values.
    """
    return structlog.contextvars.bound_contextvars(**kwargs)
