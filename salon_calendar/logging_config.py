"""Structured logging configuration.

Pattern: structlog with standard library integration, JSON output.

Context bound with bound_contextvars (the backend request id, the fetch
ticket of a calendar refresh) is merged into every event logged inside
the block, so one refresh can be followed across api_client and adapter.
"""
import logging
import sys
import uuid
from contextlib import contextmanager
from typing import Iterator, Optional

import structlog
from structlog.contextvars import bound_contextvars, merge_contextvars


def setup_structured_logging(log_level: str = "INFO"):
    """
    Configure structured logging for the dashboard.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    structlog.configure(
        processors=[
            merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level.upper())
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger (usually for __name__)."""
    return structlog.get_logger(name)


def generate_request_id() -> str:
    """Generate unique request ID for the X-Request-ID header."""
    return f"req-{uuid.uuid4().hex[:12]}"


@contextmanager
def request_context(request_id: Optional[str] = None) -> Iterator[str]:
    """
    Bind a backend request id to every log event inside the block.

    Example:
        >>> with request_context() as request_id:
        ...     session.get(url, headers={"X-Request-ID": request_id})
    """
    request_id = request_id or generate_request_id()
    with bound_contextvars(request_id=request_id):
        yield request_id
