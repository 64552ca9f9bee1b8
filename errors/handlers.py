"""
Exception handlers for the telemetry log backend.

This module provides FastAPI exception handlers that convert exceptions
to JSON error responses of the form {"error": ..., "details": ...}.
Unexpected exceptions are logged with their full stack trace and answered
with a generic message that exposes no internal details.
"""

import logging
import traceback
import uuid
from typing import Any, Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from errors.codes import ErrorCode
from errors.exceptions import AppException
from middleware.request_id import REQUEST_ID_HEADER

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."


class ErrorResponse(BaseModel):
    """
    Error response body.
    
    All error responses from the API follow this format so clients can
    show the message and, for rejected batches, the per-entry failures.
    Used for the OpenAPI description of error responses.
    """
    error: str
    details: Optional[Any] = None


def get_request_id(request: Request) -> str:
    """
    Get the request ID from the request state or generate a new one.
    
    Args:
        request: The FastAPI request object
        
    Returns:
        The request ID string
    """
    if hasattr(request.state, "request_id"):
        return request.state.request_id
    
    return str(uuid.uuid4())


async def handle_app_exception(request: Request, exc: AppException) -> JSONResponse:
    """
    Handle known application exceptions and convert to a JSON response.
    
    Args:
        request: The FastAPI request object
        exc: The AppException that was raised
        
    Returns:
        JSONResponse with the exception's status code and body
    """
    request_id = get_request_id(request)
    
    logger.warning(
        "Application error occurred",
        extra={"extra_data": {
            "error_code": exc.error_code.value,
            "error_message": exc.message,
            "status_code": exc.status_code,
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
        }}
    )
    
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers={REQUEST_ID_HEADER: request_id},
    )


async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions safely without exposing internal details.
    
    Args:
        request: The FastAPI request object
        exc: The unexpected exception that was raised
        
    Returns:
        JSONResponse with status 500 and a generic error message
    """
    request_id = get_request_id(request)
    
    logger.error(
        "Unexpected error occurred",
        extra={"extra_data": {
            "error_code": ErrorCode.INTERNAL_ERROR.value,
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
            "exception_message": str(exc),
            "stack_trace": traceback.format_exc(),
        }},
        exc_info=True,
    )
    
    # Never expose internal details
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error=GENERIC_ERROR_MESSAGE).model_dump(exclude_none=True),
        headers={REQUEST_ID_HEADER: request_id},
    )


def register_exception_handlers(app) -> None:
    """
    Register all exception handlers with the FastAPI application.
    
    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(AppException, handle_app_exception)
    
    # Catches everything else, including errors raised outside route handlers
    app.add_exception_handler(Exception, handle_unexpected_exception)
    
    logger.info("Exception handlers registered successfully")
