"""
Correlation IDs for tying log lines, Sentry events and error bodies together.

Requests get their id from CorrelationIdMiddleware; background jobs open
their own with correlation_scope().
"""

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Optional

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")


def generate_correlation_id() -> str:
    """Return a short id: 8 hex characters, easy to read out to support."""
    return uuid.uuid4().hex[:8]


def get_correlation_id() -> str:
    """Current correlation id, or empty string outside a request or job."""
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    correlation_id_var.set(correlation_id)


@contextmanager
def correlation_scope(correlation_id: Optional[str] = None) -> Iterator[str]:
    """
    Bind a correlation id for the duration of the block.

    The previous value is restored on exit.
    """
    token = correlation_id_var.set(correlation_id or generate_correlation_id())
    try:
        yield correlation_id_var.get()
    finally:
        correlation_id_var.reset(token)
