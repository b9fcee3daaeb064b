"""Observability API endpoints.

Provides Prometheus metrics and a liveness check.
"""

from fastapi import APIRouter, Depends, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from ..domain.messages.ports.message_store_port import MessageStorePort
from ..emails.dependencies import get_store

router = APIRouter(tags=["Observability"])


@router.get(
    "/metrics",
    summary="Prometheus metrics endpoint",
    include_in_schema=False,
)
def metrics():
    """Expose Prometheus metrics in the text exposition format."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


@router.get(
    "/health",
    summary="Health check endpoint",
    description="Reports that the API is serving and how many emails are held",
)
def health_check(store: MessageStorePort = Depends(get_store)):
    return {
        "status": "healthy",
        "emails": len(store),
    }
