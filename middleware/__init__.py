"""
Middleware components for the telemetry log backend.

Request correlation is the only cross-cutting HTTP concern handled here.
"""

from middleware.request_id import (
    REQUEST_ID_HEADER,
    RequestIDMiddleware,
    request_id_var,
)

__all__ = [
    "REQUEST_ID_HEADER",
    "RequestIDMiddleware",
    "request_id_var",
]
