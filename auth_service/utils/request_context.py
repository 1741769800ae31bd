"""
Request context management using contextvars.

Provides request-scoped storage for request_id (correlation ID) that is
automatically propagated to all log messages within a request.

Usage:
    # In the request logging middleware:
    from auth_service.utils.request_context import set_request_id
    set_request_id(request.headers.get("X-Request-ID"))

    # Anywhere in the request lifecycle:
    from auth_service.utils.request_context import get_request_id
    current_request_id = get_request_id()
"""

import uuid
from contextvars import ContextVar, Token
from typing import Optional

# Context variable to store request_id per request (async-safe)
_request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def get_request_id() -> Optional[str]:
    """
    Get the current request ID from context.

    Returns:
        The request ID for the current request, or None if not in a request context.
    """
    return _request_id_ctx.get()


def set_request_id(request_id: Optional[str] = None) -> Token:
    """
    Set the request ID for the current context.

    Args:
        request_id: The request ID to set. If None, generates a new short UUID.

    Returns:
        Token to pass to reset_request_id() once the request is done.
    """
    if not request_id:
        request_id = str(uuid.uuid4())[:8]  # Short UUID for readability
    return _request_id_ctx.set(request_id)


def reset_request_id(token: Token) -> None:
    """Restore the request ID that was active before set_request_id()."""
    _request_id_ctx.reset(token)
