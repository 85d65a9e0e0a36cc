"""
Centralized error types and constants for FarmLink.

Standardized error types and response builders so REST handlers and the
error middleware answer with one consistent shape.
"""

from enum import Enum
from typing import Any


class ErrorType(Enum):
    """Standardized error types for consistent categorization."""

    VALIDATION_ERROR = "validation_error"
    INVALID_INPUT = "invalid_input"
    INVALID_FORMAT = "invalid_format"

    RESOURCE_NOT_FOUND = "resource_not_found"

    DATABASE_ERROR = "database_error"

    NETWORK_ERROR = "network_error"
    CONFIGURATION_ERROR = "configuration_error"
    INTERNAL_ERROR = "internal_error"

    WEBSOCKET_ERROR = "websocket_error"
    MESSAGE_PROCESSING_ERROR = "message_processing_error"


class ErrorSeverity(Enum):
    """Error severity levels for logging and handling."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorMessages:
    """User-facing messages returned in REST error bodies."""

    USER_NOT_FOUND = "User not found"
    CALL_NOT_FOUND = "Call not found"
    CALL_HISTORY_NOT_FOUND = "Call history not found"
    INVALID_CALL_DATA = "Invalid call data"
    INVALID_CALL_HISTORY_DATA = "Invalid call history data"
    INVALID_AVAILABILITY_DATA = "Invalid availability data"
    INVALID_CALL_STATUS = "Invalid call status"
    INTERNAL_ERROR = "An internal error occurred"


def create_standard_error_response(
    error_type: ErrorType,
    message: str,
    user_friendly: str | None = None,
    details: dict[str, Any] | None = None,
    severity: ErrorSeverity = ErrorSeverity.MEDIUM,
) -> dict[str, Any]:
    """
    Create a standardized error response body.

    Args:
        error_type: Type of error
        message: Technical error message
        user_friendly: Message shown to the user
        details: Additional error details
        severity: Error severity level
    """
    return {
        "error": {
            "type": error_type.value,
            "message": message,
            "user_friendly": user_friendly or message,
            "details": details or {},
            "severity": severity.value,
        }
    }
