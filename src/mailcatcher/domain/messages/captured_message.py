"""Message records produced by the SMTP intake path."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List


@dataclass
class DraftMessage:
    """A completed SMTP transaction that has not been stored yet.

    Attributes:
        sender: Envelope MAIL FROM address, "" when none was given
        recipients: Envelope RCPT TO addresses in the order received
        subject: Subject header value extracted from the body
        body: Full DATA payload (headers, blank line and content) as text
    """
    sender: str = ""
    recipients: List[str] = field(default_factory=list)
    subject: str = ""
    body: str = ""


@dataclass(frozen=True)
class CapturedMessage:
    """A message held by the store.

    The id is "msg-<n>" where n is the store size at append time, so ids
    restart at msg-0 after a clear and an id kept across a clear may later
    refer to a different message.

    Attributes:
        id: Store-assigned identifier
        sender: Envelope sender
        recipients: Envelope recipients
        subject: Subject header value ("" if absent)
        body: Raw message text
        received_at: UTC time the store accepted the message
    """
    id: str
    sender: str
    recipients: List[str]
    subject: str
    body: str
    received_at: datetime

    @classmethod
    def from_draft(
        cls,
        draft: DraftMessage,
        message_id: str,
        received_at: datetime,
    ) -> "CapturedMessage":
        return cls(
            id=message_id,
            sender=draft.sender,
            recipients=list(draft.recipients),
            subject=draft.subject,
            body=draft.body,
            received_at=received_at,
        )
