"""Pytest fixtures for mailcatcher tests.

Provides reusable test fixtures for:
- An empty in-memory message store
- A TestClient bound to an API around that store
- A running MailCatcher on free localhost ports
- A helper that sends one message over real SMTP

Usage:
    def test_capture(catcher, send_mail):
        send_mail(catcher, "a@x.com", ["b@x.com"], "Subject: T\\r\\n\\r\\nHi")
        assert catcher.emails()[0].subject == "T"
"""

import smtplib
import socket
from typing import Generator, List

import pytest
from fastapi.testclient import TestClient

from mailcatcher.config import get_settings
from mailcatcher.domain.messages.captured_message import DraftMessage
from mailcatcher.infrastructure.storage.memory_store import InMemoryMessageStore
from mailcatcher.main import create_app
from mailcatcher.server import MailCatcher

LOCALHOST = "127.0.0.1"


def find_free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((LOCALHOST, 0))
        return sock.getsockname()[1]


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    """Keep MAILCATCHER_* from the developer's shell out of the tests."""
    monkeypatch.delenv("MAILCATCHER_SMTP_PORT", raising=False)
    monkeypatch.delenv("MAILCATCHER_HTTP_PORT", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def store() -> InMemoryMessageStore:
    return InMemoryMessageStore()


@pytest.fixture
def make_draft():
    """Factory for draft messages with sensible defaults."""
    def _make(
        sender: str = "sender@example.com",
        recipients: List[str] = None,
        subject: str = "Test",
        body: str = None,
    ) -> DraftMessage:
        if recipients is None:
            recipients = ["recipient@example.com"]
        if body is None:
            body = f"Subject: {subject}\r\n\r\nHello"
        return DraftMessage(
            sender=sender,
            recipients=recipients,
            subject=subject,
            body=body,
        )
    return _make


@pytest.fixture
def client(store) -> TestClient:
    """HTTP client for the API around the store fixture."""
    return TestClient(create_app(store))


@pytest.fixture
def catcher() -> Generator[MailCatcher, None, None]:
    """A started MailCatcher on free localhost ports."""
    server = MailCatcher(
        smtp_port=find_free_port(),
        http_port=0,
        host=LOCALHOST,
    )
    server.start()
    yield server
    server.stop(timeout=5.0)


@pytest.fixture
def send_mail():
    """Send one raw message to a running catcher over SMTP."""
    def _send(
        server: MailCatcher,
        sender: str,
        recipients: List[str],
        message: str,
        login: tuple = None,
    ) -> None:
        with smtplib.SMTP(LOCALHOST, server.smtp_port, timeout=10) as smtp:
            if login:
                smtp.login(*login)
            smtp.sendmail(sender, recipients, message)
    return _send
