"""Tests for the exception hierarchy and error response helpers."""

from types import SimpleNamespace

from farmlink.error_types import ErrorSeverity, ErrorType, create_standard_error_response
from farmlink.exceptions import (
    DatabaseError,
    ErrorContext,
    FarmLinkError,
    ResourceNotFoundError,
    ValidationError,
    create_context_from_request,
    create_error_context,
)


class TestFarmLinkError:
    def test_to_dict_includes_context_and_details(self):
        context = create_error_context(call_id=10, connection_id="abc")
        error = FarmLinkError("boom", context, details={"step": "relay"}, user_friendly="Try again")

        payload = error.to_dict()

        assert payload["error_type"] == "FarmLinkError"
        assert payload["message"] == "boom"
        assert payload["user_friendly"] == "Try again"
        assert payload["details"] == {"step": "relay"}
        assert error.context.call_id == 10

    def test_default_user_friendly_message(self):
        error = FarmLinkError("internal detail")
        assert error.user_friendly
        assert isinstance(error.context, ErrorContext)

    def test_subclass_details(self):
        assert ValidationError("bad", field="status", value="paused").details["field"] == "status"
        assert DatabaseError("down", operation="get_call", table="calls").details == {
            "operation": "get_call",
            "table": "calls",
        }
        missing = ResourceNotFoundError("nope", resource_type="call", resource_id=9)
        assert missing.details["resource_id"] == "9"


class TestContextFromRequest:
    def test_reads_correlation_header_and_path(self):
        request = SimpleNamespace(
            headers={"x-correlation-id": "corr-1"}, url=SimpleNamespace(path="/api/calls/1"), method="GET"
        )

        context = create_context_from_request(request)

        assert context.request_id == "corr-1"
        assert context.metadata == {"path": "/api/calls/1", "method": "GET"}

    def test_none_request(self):
        assert create_context_from_request(None).request_id is None


class TestStandardErrorResponse:
    def test_shape(self):
        body = create_standard_error_response(
            ErrorType.RESOURCE_NOT_FOUND, "Call 9 missing", user_friendly="Call not found", severity=ErrorSeverity.LOW
        )

        assert body == {
            "error": {
                "type": "resource_not_found",
                "message": "Call 9 missing",
                "user_friendly": "Call not found",
                "details": {},
                "severity": "low",
            }
        }
