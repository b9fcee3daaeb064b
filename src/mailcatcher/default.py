"""Process-wide default MailCatcher.

A convenience for test suites that want one shared catcher: the first call to
default_server() starts it from MAILCATCHER_* settings and later calls return
the same instance. Library code should take a MailCatcher (or a store)
as a parameter instead of reaching for this.
"""

import threading
from typing import Optional

from .config import get_settings
from .exceptions import ServerStartError
from .server import MailCatcher

DEFAULT_STOP_TIMEOUT = 5.0

_default_server: Optional[MailCatcher] = None
_default_lock = threading.Lock()


def default_server() -> MailCatcher:
    """Return the shared catcher, starting it on first use.

    Ports come from MAILCATCHER_SMTP_PORT / MAILCATCHER_HTTP_PORT
    (defaults 1025 / 8025).

    Raises:
        ServerStartError: The catcher could not be started
    """
    global _default_server
    with _default_lock:
        if _default_server is not None:
            return _default_server

        server = MailCatcher.from_settings(get_settings())
        try:
            server.start()
        except ServerStartError as e:
            raise ServerStartError(f"failed to start mail catcher: {e}") from e

        _default_server = server
        return _default_server


def stop_default() -> None:
    """Stop the shared catcher if one is running.

    The cached instance is dropped even when stopping fails, so the next
    default_server() call starts a new one.
    """
    global _default_server
    with _default_lock:
        if _default_server is None:
            return

        server, _default_server = _default_server, None
        server.stop(timeout=DEFAULT_STOP_TIMEOUT)
