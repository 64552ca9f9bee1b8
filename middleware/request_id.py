"""
Request ID middleware for log correlation.

Every request gets an ID, taken from the X-Request-ID header when the
client supplies a usable one and generated otherwise. The ID is written to
the JSON log lines for the request and echoed back in the response header.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

# Read by the JSON log formatter
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"

# Client-supplied IDs end up in log lines; keep them short and printable
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def _client_request_id(request: Request) -> Optional[str]:
    value = request.headers.get(REQUEST_ID_HEADER)
    if value and _VALID_REQUEST_ID.match(value):
        return value
    return None


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Attach a request ID to request.state, the logging context and the response.
    """
    
    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        request_id = _client_request_id(request) or str(uuid.uuid4())
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            request_id_var.reset(token)
