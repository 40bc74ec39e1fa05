"""Structured logging and OpenTelemetry spans for floe-exemplar.

This module provides:
- Structured logging setup via structlog
- OpenTelemetry span helpers for synthesis operations
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from opentelemetry import trace
from opentelemetry.trace import SpanKind, Status, StatusCode

if TYPE_CHECKING:
    from opentelemetry.trace import Span, Tracer
    from structlog.stdlib import BoundLogger

# Module-level logger and tracer
_logger: BoundLogger | None = None
_tracer: Tracer | None = None

TRACER_NAME = "floe.exemplar"


def get_logger() -> BoundLogger:
    """Get the module logger, creating it if necessary.

    Returns:
        Configured structlog BoundLogger instance.

    Example:
        >>> logger = get_logger()
        >>> logger.info("exemplar_loaded", target="Widget")
    """
    global _logger
    if _logger is None:
        _logger = structlog.get_logger(TRACER_NAME)
    assert _logger is not None  # Type narrowing for mypy
    return _logger


def get_tracer() -> Tracer:
    """Get the OpenTelemetry tracer for floe-exemplar."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer(TRACER_NAME)
    return _tracer


def configure_logging(
    *,
    log_level: str = "INFO",
    json_format: bool = True,
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for floe-exemplar.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: If True, output JSON format. If False, output human-readable.
        add_timestamp: If True, add ISO timestamp to log entries.

    Example:
        >>> configure_logging(log_level="DEBUG", json_format=False)
    """
    import logging

    processors: list[Any] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if add_timestamp:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper()),
    )


@contextmanager
def span(
    name: str,
    *,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: dict[str, Any] | None = None,
    log_start: bool = True,
    log_end: bool = True,
) -> Iterator[Span]:
    """Create an OpenTelemetry span with structured logging.

    Args:
        name: Span name (e.g., "exemplar.spawn").
        kind: Span kind.
        attributes: Optional span attributes.
        log_start: If True, log span start at debug level.
        log_end: If True, log span end at debug level.

    Yields:
        OpenTelemetry Span instance.
    """
    tracer = get_tracer()
    logger = get_logger()
    attrs = attributes or {}

    with tracer.start_as_current_span(name, kind=kind, attributes=attrs) as s:
        if log_start:
            logger.debug(f"{name}_started", **attrs)
        try:
            yield s
            s.set_status(Status(StatusCode.OK))
            if log_end:
                logger.debug(f"{name}_completed", **attrs)
        except Exception as exc:
            s.set_status(Status(StatusCode.ERROR, str(exc)))
            s.record_exception(exc)
            logger.error(f"{name}_failed", error=str(exc), **attrs)
            raise


@contextmanager
def synthesis_operation(
    operation: str,
    target_type: type,
    *,
    overrides: int | None = None,
) -> Iterator[Span]:
    """Create a span for a synthesis operation with standard attributes.

    Convenience wrapper around span() with exemplar-specific attributes.

    Args:
        operation: Operation name (spawn, generate, generate_strict).
        target_type: Class being synthesized.
        overrides: Number of overridden attributes.

    Example:
        >>> with synthesis_operation("spawn", Widget, overrides=2):
        ...     instance = Widget(**attributes)
    """
    attrs: dict[str, Any] = {
        "exemplar.operation": operation,
        "exemplar.target": target_type.__qualname__,
    }
    if overrides is not None:
        attrs["exemplar.overrides"] = overrides

    with span(f"exemplar.{operation}", attributes=attrs) as s:
        yield s
