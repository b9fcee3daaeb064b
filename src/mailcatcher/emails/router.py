"""Emails API endpoints.

Read-only views over the message store plus a bulk clear. Errors are plain
text, not JSON.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from ..domain.messages.ports.message_store_port import MessageStorePort
from .dependencies import get_store
from .schemas import EmailListResponse, EmailResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/emails", tags=["Emails"])

ENCODE_ERROR = "Failed to encode response"


def _encode(model) -> Response:
    """Serialize a response model, turning encoder failures into a 500."""
    try:
        content = model.model_dump_json(by_alias=True)
    except (ValidationError, ValueError, TypeError) as e:
        logger.error(f"Failed to encode response: {e}", exc_info=True)
        return PlainTextResponse(
            ENCODE_ERROR,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return Response(content=content, media_type="application/json")


@router.get("", response_model=EmailListResponse)
def list_emails(store: MessageStorePort = Depends(get_store)):
    """List every captured email.

    Returns:
        EmailListResponse: total and count (always equal) plus the items in
            the order the messages were captured
    """
    messages = store.list_all()
    return _encode(EmailListResponse(
        total=len(messages),
        count=len(messages),
        items=[EmailResponse.from_message(m) for m in messages],
    ))


@router.get("/", include_in_schema=False)
def get_email_without_id():
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Email ID is required",
    )


@router.get("/{email_id}", response_model=EmailResponse)
def get_email(email_id: str, store: MessageStorePort = Depends(get_store)):
    """Fetch one email by id.

    Ids are reassigned from msg-0 after a clear, so an id saved before a
    clear may now name a different email.

    Raises:
        HTTPException: 404 if no email has that id
    """
    message = store.get(email_id)
    if message is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Email not found",
        )
    return _encode(EmailResponse.from_message(message))


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def clear_emails(store: MessageStorePort = Depends(get_store)):
    """Remove every captured email."""
    store.clear()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
