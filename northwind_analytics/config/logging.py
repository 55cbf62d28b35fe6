"""
Logging Configuration for Northwind Analytics

structlog events are rendered through the stdlib logging tree, so report
logs, uvicorn logs and third-party logs share one handler and one format.
Report runs bind their report name and snapshot id with ``report_context``
so every event emitted while a report computes carries both.
"""

from contextlib import contextmanager
import logging
import sys
from typing import IO, Iterator, List, Optional

import structlog
from structlog.processors import JSONRenderer, TimeStamper
from structlog.stdlib import ProcessorFormatter, add_log_level
from structlog.types import Processor

from northwind_analytics.config.settings import get_settings

UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def _shared_processors() -> List[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        add_log_level,
        TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(log_format: str, stream: IO[str]) -> Processor:
    if log_format == "json":
        return JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=stream.isatty())


def configure_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    stream: Optional[IO[str]] = None,
) -> None:
    """
    Configure structured logging for the API and the CLI.

    Args:
        log_level: Override LOG_LEVEL (DEBUG, INFO, WARNING, ERROR)
        log_format: Override LOG_FORMAT ("json" or "text")
        stream: Destination, stderr by default so report output on stdout
            stays machine-readable
    """
    settings = get_settings()
    level_name = (log_level or settings.monitoring.log_level).upper()
    log_format = (log_format or settings.monitoring.log_format).lower()
    stream = stream or sys.stderr
    level = getattr(logging, level_name, logging.INFO)

    shared = _shared_processors()
    structlog.configure(
        processors=shared + [ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.setFormatter(
        ProcessorFormatter(processor=_renderer(log_format, stream), foreign_pre_chain=shared)
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    for name in UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = [handler]
        uvicorn_logger.propagate = False
        uvicorn_logger.setLevel(level)

    structlog.get_logger(__name__).debug(
        "Logging configured",
        level=level_name,
        format=log_format,
        environment=settings.app_env,
    )


@contextmanager
def report_context(report: str, snapshot_id: str) -> Iterator[None]:
    """Bind report and snapshot ids to every event logged in the block"""
    with structlog.contextvars.bound_contextvars(report=report, snapshot_id=snapshot_id):
        yield