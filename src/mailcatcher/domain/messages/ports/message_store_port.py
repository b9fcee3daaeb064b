"""Message Store Port - Domain interface for captured mail storage.

The SMTP listener appends to the store and the HTTP API reads from it. The two
run on different threads, so every implementation must be safe for concurrent
callers.

Architecture: Hexagonal - Port interface in domain layer
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..captured_message import CapturedMessage, DraftMessage


class MessageStorePort(ABC):
    """Port interface for the ordered collection of captured messages.

    Key Design Principles:
    - Append-only, apart from the atomic bulk clear
    - Insertion order is the order appends complete
    - Identifiers derive from the collection size at append time
    - Readers never observe a partially appended message

    Example Usage:
        store = InMemoryMessageStore()
        message = store.append(DraftMessage(sender="a@x.com", recipients=["b@x.com"]))
        assert store.get(message.id) == message
    """

    @abstractmethod
    def append(self, draft: DraftMessage) -> CapturedMessage:
        """Assign id and timestamp, store the message at the tail.

        Args:
            draft: Completed transaction from an intake session

        Returns:
            CapturedMessage: The stored record
        """
        pass

    @abstractmethod
    def list_all(self) -> List[CapturedMessage]:
        """Return a snapshot of all messages in insertion order."""
        pass

    @abstractmethod
    def get(self, message_id: str) -> Optional[CapturedMessage]:
        """Return the message with the given id, or None if absent."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Atomically remove every message."""
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass
