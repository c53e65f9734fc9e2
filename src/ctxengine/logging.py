"""Logging configuration using structlog."""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog

SERVICE_NAME = "ctxengine"


def _add_service(service: str) -> structlog.types.Processor:
    def processor(
        logger: Any, method_name: str, event_dict: structlog.types.EventDict
    ) -> structlog.types.EventDict:
        event_dict.setdefault("service", service)
        return event_dict

    return processor


def build_processors(
    log_format: str = "console", service: str = SERVICE_NAME
) -> list[Any]:
    """Processor chain shared by every ctxengine entry point."""
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        _add_service(service),
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if log_format == "json":
        processors.extend([
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ])
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    return processors


def configure_logging(
    log_level: str = "INFO",
    log_format: str = "console",
    service: str = SERVICE_NAME,
) -> None:
    """Configure structlog for the engine and CLI.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format ("json" for JSON lines, "console" for human-readable)
        service: Value of the ``service`` field stamped on every event
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    # stdout carries command output, logs go to stderr
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=numeric_level,
    )

    structlog.configure(
        processors=build_processors(log_format, service),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


@contextmanager
def analysis_context(query: str, current_file: str | None = None) -> Iterator[None]:
    """Attach the request's query and file to every event logged inside."""
    with structlog.contextvars.bound_contextvars(
        query=query, current_file=current_file
    ):
        yield
