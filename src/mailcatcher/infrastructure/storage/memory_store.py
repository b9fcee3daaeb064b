"""In-memory Message Store - Implementation of MessageStorePort.

Messages live in a list guarded by one threading.Lock. The SMTP listener runs
on the aiosmtpd controller thread and the HTTP API on the uvicorn thread, so
the lock must be a thread lock. Contents are lost when the process exits.

Architecture: Hexagonal - Adapter implementation in infrastructure layer
"""

import logging
import threading
from datetime import datetime, timezone
from typing import List, Optional

from ...domain.messages.captured_message import CapturedMessage, DraftMessage
from ...domain.messages.ports.message_store_port import MessageStorePort
from ...observability.metrics import emails_captured_total, emails_cleared_total

logger = logging.getLogger(__name__)


class InMemoryMessageStore(MessageStorePort):
    """Thread-safe list of captured messages.

    Features:
    - Ids are "msg-<n>" with n the list length at append time
    - list_all() returns a copy, never the live list
    - Lookup by id is a linear scan (stores stay small in tests)
    """

    def __init__(self):
        self._messages: List[CapturedMessage] = []
        self._lock = threading.Lock()

    def append(self, draft: DraftMessage) -> CapturedMessage:
        with self._lock:
            message = CapturedMessage.from_draft(
                draft,
                message_id=f"msg-{len(self._messages)}",
                received_at=datetime.now(timezone.utc),
            )
            self._messages.append(message)

        emails_captured_total.inc()
        logger.debug(
            f"Stored message: id={message.id}, from={message.sender}, "
            f"to={message.recipients}, size={len(message.body)} chars"
        )
        return message

    def list_all(self) -> List[CapturedMessage]:
        with self._lock:
            return list(self._messages)

    def get(self, message_id: str) -> Optional[CapturedMessage]:
        with self._lock:
            for message in self._messages:
                if message.id == message_id:
                    return message
        return None

    def clear(self) -> None:
        with self._lock:
            removed = len(self._messages)
            self._messages = []

        emails_cleared_total.inc(removed)
        logger.debug(f"Cleared {removed} messages")

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)
