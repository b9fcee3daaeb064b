"""Pydantic schemas for the emails API.

Field names on the wire match the mailcatcher JSON contract
({id, from, to, subject, body, time}); "from" is a Python keyword, hence
the alias.
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from ..domain.messages.captured_message import CapturedMessage


class EmailResponse(BaseModel):
    """One captured email"""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Store identifier, e.g. msg-0")
    sender: str = Field(..., alias="from", description="Envelope sender")
    to: List[str] = Field(default_factory=list, description="Envelope recipients")
    subject: str = Field("", description="Subject header value")
    body: str = Field("", description="Raw message including headers")
    time: datetime = Field(..., description="Capture time (RFC 3339)")

    @classmethod
    def from_message(cls, message: CapturedMessage) -> "EmailResponse":
        return cls(
            id=message.id,
            sender=message.sender,
            to=list(message.recipients),
            subject=message.subject,
            body=message.body,
            time=message.received_at,
        )


class EmailListResponse(BaseModel):
    """All captured emails in arrival order"""
    total: int = Field(..., description="Number of emails held")
    count: int = Field(..., description="Number of emails in items")
    items: List[EmailResponse]
