"""
Exception handlers for the FarmLink REST API.

Errors are rendered with a top-level "message" (and "errors" for validation
failures), which is the shape the web client reads, alongside the
standardized "error" block from farmlink.error_types.
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from ..error_types import ErrorMessages, ErrorSeverity, ErrorType, create_standard_error_response
from ..exceptions import DatabaseError, FarmLinkError, ResourceNotFoundError, ValidationError
from ..structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)


_VALIDATION_MESSAGES = (
    ("/api/calls", ErrorMessages.INVALID_CALL_DATA),
    ("/api/call-history", ErrorMessages.INVALID_CALL_HISTORY_DATA),
    ("/api/availability", ErrorMessages.INVALID_AVAILABILITY_DATA),
)


def _validation_message(path: str) -> str:
    for prefix, message in _VALIDATION_MESSAGES:
        if path.startswith(prefix):
            return message
    return "Invalid request data"


def _summarize_validation_errors(errors: list[Any]) -> list[dict[str, Any]]:
    """Reduce pydantic error entries to JSON-safe dicts."""
    return [
        {
            "loc": [str(part) for part in error.get("loc", ())],
            "msg": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in errors
    ]


def _error_body(
    message: str,
    error_type: ErrorType,
    *,
    details: dict[str, Any] | None = None,
    severity: ErrorSeverity = ErrorSeverity.MEDIUM,
    errors: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {"message": message}
    if errors is not None:
        body["errors"] = errors
    body.update(create_standard_error_response(error_type, message, details=details, severity=severity))
    return body


def _status_for(exc: FarmLinkError) -> tuple[int, ErrorType]:
    if isinstance(exc, ResourceNotFoundError):
        return 404, ErrorType.RESOURCE_NOT_FOUND
    if isinstance(exc, ValidationError):
        return 400, ErrorType.VALIDATION_ERROR
    if isinstance(exc, DatabaseError):
        return 500, ErrorType.DATABASE_ERROR
    return 500, ErrorType.INTERNAL_ERROR


def register_error_handlers(app: FastAPI, include_details: bool = False) -> None:
    """
    Register exception handlers so every API error has the same JSON shape.

    Args:
        app: FastAPI application instance
        include_details: Include exception details in 5xx responses
    """

    @app.exception_handler(FarmLinkError)
    async def farmlink_error_handler(request: Request, exc: FarmLinkError) -> JSONResponse:
        """FarmLinkError instances were logged by their constructor."""
        status_code, error_type = _status_for(exc)
        errors = [exc.details] if status_code == 400 else None
        details = exc.details if (status_code < 500 or include_details) else None
        return JSONResponse(
            status_code=status_code,
            content=_error_body(exc.user_friendly, error_type, details=details, errors=errors),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = _summarize_validation_errors(list(exc.errors()))
        logger.warning("Request validation failed", method=request.method, path=request.url.path, errors=errors)
        return JSONResponse(
            status_code=400,
            content=_error_body(
                _validation_message(request.url.path),
                ErrorType.INVALID_INPUT,
                severity=ErrorSeverity.LOW,
                errors=errors,
            ),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        error_type = ErrorType.RESOURCE_NOT_FOUND if exc.status_code == 404 else ErrorType.INVALID_INPUT
        if exc.status_code >= 500:
            error_type = ErrorType.INTERNAL_ERROR
        message = exc.detail if isinstance(exc.detail, str) else ErrorMessages.INTERNAL_ERROR
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(message, error_type),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled exception in request",
            method=request.method,
            path=request.url.path,
            error_type=type(exc).__name__,
            error=str(exc),
            exc_info=True,
        )
        details = {"error_type": type(exc).__name__, "error": str(exc)} if include_details else None
        return JSONResponse(
            status_code=500,
            content=_error_body(
                ErrorMessages.INTERNAL_ERROR, ErrorType.INTERNAL_ERROR, details=details, severity=ErrorSeverity.HIGH
            ),
        )

    logger.info("Error handlers registered for FastAPI application")
