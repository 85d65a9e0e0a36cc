"""
Context management utilities for enhanced logging.

This module provides functions for managing logging context, including
request context binding and clearing.
"""

import uuid
from typing import Any

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars, unbind_contextvars


def bind_request_context(
    correlation_id: str | None = None,
    user_id: int | str | None = None,
    connection_id: str | None = None,
    request_id: str | None = None,
    **kwargs: Any,
) -> None:
    """
    Bind request context to the current logging context.

    All log entries emitted afterwards in the same context (HTTP request or
    signaling connection task) include these fields.

    Args:
        correlation_id: Unique correlation ID for the request
        user_id: User ID if available
        connection_id: Signaling connection ID if available
        request_id: Request ID if available
        **kwargs: Additional context variables
    """
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())

    context_vars = {
        "correlation_id": correlation_id,
        "user_id": user_id,
        "connection_id": connection_id,
        "request_id": request_id,
        **kwargs,
    }

    # Remove None values
    context_vars = {k: v for k, v in context_vars.items() if v is not None}

    bind_contextvars(**context_vars)


def unbind_request_context(*keys: str) -> None:
    """Remove individual keys from the current logging context."""
    unbind_contextvars(*keys)


def clear_request_context() -> None:
    """Clear the current request context from logging."""
    clear_contextvars()


def get_current_context() -> dict[str, Any]:
    """Get the current logging context."""
    try:
        return structlog.contextvars.get_contextvars()
    except (AttributeError, KeyError):
        return {}
