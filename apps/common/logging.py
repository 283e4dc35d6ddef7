"""
Request-scoped logging context for the Mesa POS promotions engine.

RequestIDFilter injects the current request and tenant identifiers into every
log record so discount operations can be correlated across log lines.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

# Thread-local storage for request context
_request_context = threading.local()

CONTEXT_ATTRIBUTES = ("request_id", "tenant_id")


def set_request_context(**kwargs: Any) -> None:
    """Set request context for the current thread"""
    for key, value in kwargs.items():
        setattr(_request_context, key, value)


def get_request_context() -> dict[str, Any]:
    return {
        "request_id": getattr(_request_context, "request_id", "-"),
        "tenant_id": getattr(_request_context, "tenant_id", None),
    }


def clear_request_context() -> None:
    for attr in CONTEXT_ATTRIBUTES:
        if hasattr(_request_context, attr):
            delattr(_request_context, attr)


class RequestIDFilter(logging.Filter):
    """Add request ID and tenant to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = get_request_context()
        if not hasattr(record, "request_id"):
            record.request_id = context["request_id"]
        if not hasattr(record, "tenant_id"):
            record.tenant_id = context["tenant_id"]
        return True
