"""
Request correlation and timing.

A client-supplied X-Request-ID is reused only when it is a short token of
safe characters, so it can be written to logs and echoed back verbatim.
"""

import re
import time
import uuid
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from sessionauth.logging_config import get_logger, request_id_var

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
_REQUEST_ID_RE = re.compile(r"[\w.\-]{1,128}")

SLOW_REQUEST_MS = 1000
# Signup and signin are dominated by argon2 hashing.
PASSWORD_HASHING_PATHS = ("/auth/signup", "/auth/signin")
SLOW_HASHING_REQUEST_MS = 3000


def resolve_request_id(incoming: Optional[str]) -> str:
    if incoming and _REQUEST_ID_RE.fullmatch(incoming):
        return incoming
    return str(uuid.uuid4())


def slow_threshold_ms(path: str) -> int:
    if path.endswith(PASSWORD_HASHING_PATHS):
        return SLOW_HASHING_REQUEST_MS
    return SLOW_REQUEST_MS


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Bind a request id to the log context and report slow requests."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        token = request_id_var.set(request_id)

        start = time.perf_counter()
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id

            duration_ms = round((time.perf_counter() - start) * 1000, 1)
            path = request.url.path
            fields = {
                "method": request.method,
                "path": path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            }
            if duration_ms > slow_threshold_ms(path):
                logger.warning("Slow request", extra=fields)
            else:
                logger.debug("Request handled", extra=fields)
            return response
        finally:
            request_id_var.reset(token)
