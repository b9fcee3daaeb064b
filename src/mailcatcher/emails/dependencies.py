"""FastAPI dependencies for the emails API."""

from fastapi import Request

from ..domain.messages.ports.message_store_port import MessageStorePort


def get_store(request: Request) -> MessageStorePort:
    """Return the message store attached to the running application."""
    return request.app.state.store
