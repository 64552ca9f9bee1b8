"""
Unit tests for error handlers.

Tests the error response body and exception handlers to ensure they
produce {"error": ..., "details": ...} responses with the right status.
"""

import json

import pytest
from unittest.mock import MagicMock
from fastapi import Request
from fastapi.responses import JSONResponse

from errors.codes import ErrorCode, get_default_status_code
from errors.exceptions import AppException, invalid_request, validation_error
from errors.handlers import (
    GENERIC_ERROR_MESSAGE,
    ErrorResponse,
    get_request_id,
    handle_app_exception,
    handle_unexpected_exception,
    register_exception_handlers,
)


def _mock_request(request_id="test-request-id", method="POST"):
    request = MagicMock(spec=Request)
    request.state.request_id = request_id
    request.url.path = "/logs/upload"
    request.method = method
    return request


class TestAppException:
    """Tests for AppException and its factories."""
    
    def test_default_status_codes(self):
        assert get_default_status_code(ErrorCode.VALIDATION_ERROR) == 400
        assert get_default_status_code(ErrorCode.INVALID_REQUEST) == 400
        assert get_default_status_code(ErrorCode.INTERNAL_ERROR) == 500
    
    def test_factories_set_error_codes(self):
        assert validation_error("bad").error_code == ErrorCode.VALIDATION_ERROR
        assert invalid_request("bad").error_code == ErrorCode.INVALID_REQUEST
    
    def test_to_dict_without_details(self):
        exc = invalid_request("Request body must be an array of log entries")
        assert exc.to_dict() == {"error": "Request body must be an array of log entries"}
    
    def test_to_dict_with_list_details(self):
        details = [{"index": 0, "entry": {}, "reason": "r"}]
        exc = validation_error("Some entries are invalid", details=details)
        
        assert exc.to_dict() == {"error": "Some entries are invalid", "details": details}
    
    def test_repr_includes_error_code(self):
        assert "VALIDATION_ERROR" in repr(validation_error("bad"))


class TestErrorResponse:
    """Tests for the ErrorResponse model."""
    
    def test_error_response_without_details(self):
        response = ErrorResponse(error="An error occurred")
        
        assert response.details is None
        assert response.model_dump(exclude_none=True) == {"error": "An error occurred"}


class TestGetRequestId:
    """Tests for the get_request_id function."""
    
    def test_get_request_id_from_state(self):
        assert get_request_id(_mock_request("existing-request-id")) == "existing-request-id"
    
    def test_get_request_id_generates_uuid_when_not_set(self):
        request = MagicMock(spec=Request)
        del request.state.request_id
        
        result = get_request_id(request)
        
        assert len(result) == 36
        assert result.count("-") == 4


class TestHandleAppException:
    """Tests for the handle_app_exception handler."""
    
    @pytest.mark.asyncio
    async def test_returns_body_and_status(self):
        details = [{"index": 1, "entry": {"timestamp": 0}, "reason": "timestamp must be a positive integer"}]
        exc = validation_error("Some entries are invalid", details=details)
        
        response = await handle_app_exception(_mock_request(), exc)
        
        assert isinstance(response, JSONResponse)
        assert response.status_code == 400
        assert json.loads(response.body) == {
            "error": "Some entries are invalid",
            "details": details,
        }
    
    @pytest.mark.asyncio
    async def test_sets_request_id_header(self):
        response = await handle_app_exception(_mock_request("req-42"), invalid_request("bad"))
        assert response.headers["X-Request-ID"] == "req-42"
    
    @pytest.mark.asyncio
    async def test_uses_explicit_status_code(self):
        exc = AppException(ErrorCode.INVALID_REQUEST, "Too large", status_code=413)
        response = await handle_app_exception(_mock_request(), exc)
        assert response.status_code == 413


class TestHandleUnexpectedException:
    """Tests for the handle_unexpected_exception handler."""
    
    @pytest.mark.asyncio
    async def test_returns_500_with_generic_message(self):
        exc = RuntimeError("store path /var/lib/secret is corrupt")
        
        response = await handle_unexpected_exception(_mock_request(), exc)
        
        assert response.status_code == 500
        data = json.loads(response.body)
        assert data == {"error": GENERIC_ERROR_MESSAGE}
        assert "secret" not in response.body.decode("utf-8")
    
    @pytest.mark.asyncio
    async def test_includes_request_id_header(self):
        response = await handle_unexpected_exception(_mock_request("unique-123"), Exception("x"))
        assert response.headers["X-Request-ID"] == "unique-123"


class TestRegisterExceptionHandlers:
    """Tests for the register_exception_handlers function."""
    
    def test_register_exception_handlers_adds_handlers(self):
        mock_app = MagicMock()
        
        register_exception_handlers(mock_app)
        
        assert mock_app.add_exception_handler.call_count == 2
        exception_types = [call[0][0] for call in mock_app.add_exception_handler.call_args_list]
        assert AppException in exception_types
        assert Exception in exception_types
