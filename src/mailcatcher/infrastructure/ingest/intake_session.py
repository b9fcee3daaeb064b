"""Per-connection SMTP intake session.

Turns the MAIL / RCPT / DATA sequence of one connection into appends on the
message store. The session is independent of the transport so it can be
driven directly in tests; the aiosmtpd adapter in smtp_handler feeds it.

Lifecycle:
    IDLE -> mail() -> ENVELOPED -> rcpt()* -> ADDRESSED -> data() -> IDLE
    any state -> reset() -> IDLE
    any state -> logout() -> CLOSED (terminal)

Phase order is not validated: data() before mail() stores a message with an
empty sender. Command sequencing is left to the SMTP protocol layer.
"""

import logging
from enum import Enum
from typing import BinaryIO, List, Optional, Union

from ...domain.messages.captured_message import CapturedMessage, DraftMessage
from ...domain.messages.headers import parse_subject
from ...domain.messages.ports.message_store_port import MessageStorePort
from ...exceptions import BodyReadError, SessionClosedError

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """Intake session states."""
    IDLE = "IDLE"
    ENVELOPED = "ENVELOPED"
    ADDRESSED = "ADDRESSED"
    CLOSED = "CLOSED"


class IntakeSession:
    """Accumulates one SMTP transaction at a time for a single connection.

    Attributes:
        store: Store receiving completed messages
        accept_any_credentials: When True every AUTH attempt succeeds.
            Never enable outside local testing.
        sender: Envelope sender of the current transaction
        recipients: Envelope recipients of the current transaction
        state: Current SessionState
    """

    def __init__(
        self,
        store: MessageStorePort,
        accept_any_credentials: bool = True,
    ):
        self.store = store
        self.accept_any_credentials = accept_any_credentials
        self.sender = ""
        self.recipients: List[str] = []
        self.state = SessionState.IDLE

    def _ensure_open(self) -> None:
        if self.state is SessionState.CLOSED:
            raise SessionClosedError("Session already logged out")

    def authenticate(self, mechanism: str, username: Optional[str] = None) -> bool:
        """Handle an AUTH attempt.

        Credentials are never checked. The outcome depends only on the
        accept_any_credentials policy and the state is left unchanged.
        """
        self._ensure_open()
        logger.debug(f"AUTH {mechanism} for user={username!r}")
        return self.accept_any_credentials

    def mail(self, address: str) -> None:
        """Record the envelope sender."""
        self._ensure_open()
        self.sender = address
        self.state = SessionState.ENVELOPED

    def rcpt(self, address: str) -> None:
        """Add one envelope recipient."""
        self._ensure_open()
        self.recipients.append(address)
        self.state = SessionState.ADDRESSED

    def data(self, payload: Union[bytes, BinaryIO]) -> CapturedMessage:
        """Complete the transaction with the message payload.

        Args:
            payload: Raw message bytes, or a binary stream that is read to EOF

        Returns:
            CapturedMessage: The stored message

        Raises:
            BodyReadError: The stream failed while being read. Nothing is
                stored and the envelope is kept so the caller can drop the
                connection.
            SessionClosedError: The session already logged out
        """
        self._ensure_open()

        if isinstance(payload, (bytes, bytearray)):
            raw = bytes(payload)
        else:
            try:
                raw = payload.read()
            except OSError as e:
                raise BodyReadError(f"Failed to read message data: {e}") from e

        body = raw.decode("utf-8", errors="replace")
        draft = DraftMessage(
            sender=self.sender,
            recipients=list(self.recipients),
            subject=parse_subject(body),
            body=body,
        )
        message = self.store.append(draft)

        logger.info(
            f"Captured message: id={message.id}, from={message.sender}, "
            f"to={message.recipients}, subject={message.subject!r}"
        )

        # Ready for the next transaction on this connection
        self.sender = ""
        self.recipients = []
        self.state = SessionState.IDLE
        return message

    def reset(self) -> None:
        """Drop the current envelope; stored messages are untouched."""
        self._ensure_open()
        self.sender = ""
        self.recipients = []
        self.state = SessionState.IDLE

    def logout(self) -> None:
        """End the session. Calling it again is a no-op."""
        self.sender = ""
        self.recipients = []
        self.state = SessionState.CLOSED
