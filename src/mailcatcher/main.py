"""mailcatcher HTTP API - FastAPI application factory.

This module creates and configures the FastAPI application, including:
- The emails router (list, fetch, clear)
- Middleware (request ID correlation, CORS)
- Exception handlers returning plain-text errors
- Health and metrics endpoints

The message store is injected by the caller; the application never creates
one of its own.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .domain.messages.ports.message_store_port import MessageStorePort
from .emails.router import ENCODE_ERROR, router as emails_router
from .infrastructure.storage.memory_store import InMemoryMessageStore
from .observability.middleware import CORS_HEADERS, CORSHeadersMiddleware, RequestIDMiddleware
from .observability.router import router as observability_router
from .version import __version__

logger = logging.getLogger(__name__)


def create_app(store: Optional[MessageStorePort] = None) -> FastAPI:
    """Build the HTTP API around a message store.

    Args:
        store: Store shared with the SMTP listener. A fresh in-memory
            store is used when omitted (handy for tests).

    Returns:
        FastAPI: Configured application
    """
    app = FastAPI(
        title="mailcatcher API",
        description="Captured SMTP messages for integration testing",
        version=__version__,
    )
    app.state.store = store if store is not None else InMemoryMessageStore()

    # =========================================================================
    # MIDDLEWARE CONFIGURATION
    # =========================================================================

    app.add_middleware(RequestIDMiddleware)
    # Added last so it wraps everything, including preflight short-circuits
    app.add_middleware(CORSHeadersMiddleware)

    # =========================================================================
    # EXCEPTION HANDLERS
    # =========================================================================

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request,
        exc: StarletteHTTPException
    ) -> PlainTextResponse:
        """Return HTTP errors as plain text instead of JSON."""
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        return PlainTextResponse(
            detail,
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request,
        exc: Exception
    ) -> PlainTextResponse:
        """Handle uncaught exceptions.

        Full details are logged but not exposed to the client. This handler runs
        outside the middleware stack, so it adds the CORS headers itself.
        """
        logger.error(
            f"Unhandled exception on {request.method} {request.url.path}",
            exc_info=exc
        )
        return PlainTextResponse(
            ENCODE_ERROR,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            headers=CORS_HEADERS,
        )

    # =========================================================================
    # ROUTER REGISTRATION
    # =========================================================================

    app.include_router(observability_router)
    app.include_router(emails_router, prefix="/api/v1")

    return app
