"""HTTP middleware and exception handlers for the FarmLink server."""

from .correlation_middleware import CorrelationMiddleware
from .error_handling_middleware import register_error_handlers

__all__ = ["CorrelationMiddleware", "register_error_handlers"]
