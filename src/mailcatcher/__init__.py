"""mailcatcher - in-process SMTP mail catcher for integration testing.

Captures mail sent over SMTP and exposes it through a programmatic API and a
CORS-enabled JSON HTTP API.

Quick start:
    from mailcatcher import MailCatcher

    with MailCatcher(smtp_port=2525, http_port=8080) as catcher:
        send_mail_to("localhost", 2525)
        assert catcher.emails()[0].subject == "Welcome"
"""

import logging

from .domain.messages.captured_message import CapturedMessage, DraftMessage
from .exceptions import MailCatcherError, ServerStartError, ServerStopError
from .server import MailCatcher
from .version import __version__

__all__ = [
    "CapturedMessage",
    "DraftMessage",
    "MailCatcher",
    "MailCatcherError",
    "ServerStartError",
    "ServerStopError",
    "__version__",
]

# Silent unless the host application configures logging
logging.getLogger(__name__).addHandler(logging.NullHandler())
