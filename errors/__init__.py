"""
Error handling for the telemetry log backend.

Every error leaves the API as {"error": message} with an optional
"details" field; rejected log batches put their per-entry failures
(index, entry, reason) there. Unexpected exceptions are answered with a
generic 500 message.
"""

from errors.codes import ErrorCode
from errors.exceptions import AppException
from errors.handlers import (
    ErrorResponse,
    handle_app_exception,
    handle_unexpected_exception,
    register_exception_handlers,
)

__all__ = [
    "ErrorCode",
    "AppException",
    "ErrorResponse",
    "handle_app_exception",
    "handle_unexpected_exception",
    "register_exception_handlers",
]
