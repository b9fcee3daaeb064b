"""FastAPI middleware for the HTTP API.

Provides request ID correlation and the permissive CORS headers browser
tooling needs to read captured mail.
"""

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from .logging_config import get_logger
from .request_id import generate_request_id, reset_request_id, set_request_id

logger = get_logger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware to generate and inject request IDs."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        token = set_request_id(request_id)

        start_time = time.time()
        try:
            response = await call_next(request)

            duration_ms = (time.time() - start_time) * 1000
            logger.debug(
                f"{request.method} {request.url.path} -> {response.status_code}",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": round(duration_ms, 2),
                }
            )
        finally:
            reset_request_id(token)

        response.headers["X-Request-ID"] = request_id
        return response


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """Allow any origin on every response and answer all preflights.

    Unlike starlette's CORSMiddleware, every OPTIONS request is answered with
    204 whether or not it carries preflight headers.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.method == "OPTIONS":
            response = Response(status_code=204)
        else:
            response = await call_next(request)

        response.headers.update(CORS_HEADERS)
        return response
