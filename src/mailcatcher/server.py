"""MailCatcher - the SMTP listener, HTTP API and store wired together.

One MailCatcher owns one message store, an aiosmtpd controller feeding it and
a uvicorn server exposing it. Both listeners run on background threads so the
object can be used directly from synchronous test code.

Usage:
    catcher = MailCatcher(smtp_port=2525, http_port=8080)
    catcher.start()
    try:
        ...  # code under test sends mail to localhost:2525
        assert len(catcher.emails()) == 1
    finally:
        catcher.stop()
"""

import logging
import socket
import threading
import time
from typing import List, Optional

import uvicorn

from .config import DEFAULT_HTTP_PORT, DEFAULT_MAX_LINE_LENGTH, DEFAULT_SMTP_PORT, Settings
from .domain.messages.captured_message import CapturedMessage
from .domain.messages.ports.message_store_port import MessageStorePort
from .exceptions import ServerStartError, ServerStopError
from .infrastructure.ingest.smtp_handler import CatcherController, CatcherSMTPHandler
from .infrastructure.storage.memory_store import InMemoryMessageStore
from .main import create_app

logger = logging.getLogger(__name__)

STARTUP_TIMEOUT = 5.0


def _bind_socket(host: str, port: int) -> socket.socket:
    """Bind (but do not listen on) a TCP socket."""
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
    except OSError:
        sock.close()
        raise
    return sock


def _free_port(host: str) -> int:
    """Ask the OS for an unused port on host."""
    with _bind_socket(host, 0) as sock:
        return sock.getsockname()[1]


class MailCatcher:
    """In-process SMTP mail catcher with a JSON HTTP API.

    Attributes:
        store: Shared message store
        host: Interface both listeners bind to
        smtp_port: SMTP port (the real one once started, if 0 was requested)
        http_port: HTTP port (the real one once started, if 0 was requested)
    """

    def __init__(
        self,
        smtp_port: int = DEFAULT_SMTP_PORT,
        http_port: int = DEFAULT_HTTP_PORT,
        host: str = "0.0.0.0",
        store: Optional[MessageStorePort] = None,
        *,
        domain: str = "localhost",
        line_length_limit: int = DEFAULT_MAX_LINE_LENGTH,
        data_size_limit: int = 0,
        accept_any_credentials: bool = True,
        access_log: bool = False,
    ):
        self.store = store if store is not None else InMemoryMessageStore()
        self.host = host
        self.smtp_port = smtp_port
        self.http_port = http_port
        self.domain = domain
        self.line_length_limit = line_length_limit
        self.data_size_limit = data_size_limit
        self.accept_any_credentials = accept_any_credentials
        self.access_log = access_log

        self.app = create_app(self.store)
        self._smtp_controller: Optional[CatcherController] = None
        self._http_server: Optional[uvicorn.Server] = None
        self._http_thread: Optional[threading.Thread] = None
        self._running = False

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store: Optional[MessageStorePort] = None,
        access_log: bool = False,
    ) -> "MailCatcher":
        return cls(
            smtp_port=settings.SMTP_PORT,
            http_port=settings.HTTP_PORT,
            host=settings.HOST,
            store=store,
            domain=settings.SMTP_DOMAIN,
            line_length_limit=settings.SMTP_MAX_LINE_LENGTH,
            data_size_limit=settings.SMTP_DATA_SIZE_LIMIT,
            accept_any_credentials=settings.ACCEPT_ANY_CREDENTIALS,
            access_log=access_log,
        )

    @property
    def running(self) -> bool:
        return self._running

    @property
    def http_url(self) -> str:
        host = "localhost" if self.host in ("", "0.0.0.0", "::") else self.host
        return f"http://{host}:{self.http_port}"

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def start(self) -> None:
        """Bind both listeners and start serving.

        Raises:
            ServerStartError: A port could not be bound or a listener did not
                come up. Nothing is left running in that case.
        """
        if self._running:
            return

        try:
            http_socket = _bind_socket(self.host, self.http_port)
        except OSError as e:
            raise ServerStartError(
                f"failed to start HTTP server on port {self.http_port}: {e}"
            ) from e
        self.http_port = http_socket.getsockname()[1]

        try:
            self._start_smtp()
        except (OSError, RuntimeError) as e:
            http_socket.close()
            raise ServerStartError(
                f"failed to start SMTP server on port {self.smtp_port}: {e}"
            ) from e

        try:
            self._start_http(http_socket)
        except ServerStartError:
            self._smtp_controller.stop()
            self._smtp_controller = None
            http_socket.close()
            raise

        self._running = True
        logger.info(f"SMTP server listening on {self.host}:{self.smtp_port}")
        logger.info(f"HTTP API listening on {self.host}:{self.http_port}")

    def _start_smtp(self) -> None:
        # The controller's readiness probe cannot connect to port 0
        if self.smtp_port == 0:
            self.smtp_port = _free_port(self.host)

        handler = CatcherSMTPHandler(self.store, self.accept_any_credentials)
        controller = CatcherController(
            handler,
            hostname=self.host,
            port=self.smtp_port,
            domain=self.domain,
            line_length_limit=self.line_length_limit,
            data_size_limit=self.data_size_limit,
        )
        controller.start()
        self._smtp_controller = controller

    def _start_http(self, http_socket: socket.socket) -> None:
        config = uvicorn.Config(
            self.app,
            log_config=None,
            access_log=self.access_log,
            lifespan="off",
        )
        server = uvicorn.Server(config)
        thread = threading.Thread(
            target=server.run,
            kwargs={"sockets": [http_socket]},
            name="mailcatcher-http",
            daemon=True,
        )
        thread.start()

        deadline = time.monotonic() + STARTUP_TIMEOUT
        while not server.started:
            if not thread.is_alive() or time.monotonic() > deadline:
                server.should_exit = True
                raise ServerStartError(
                    f"HTTP server on port {self.http_port} did not start"
                )
            time.sleep(0.01)

        self._http_server = server
        self._http_thread = thread

    def stop(self, timeout: float = 5.0) -> None:
        """Stop both listeners.

        SMTP stops accepting immediately. The HTTP server then stops accepting
        and in-flight requests get whatever is left of timeout to finish.

        Args:
            timeout: Deadline in seconds for the whole shutdown

        Raises:
            ServerStopError: The HTTP server was still running at the deadline
        """
        if not self._running:
            return
        deadline = time.monotonic() + timeout

        self._smtp_controller.stop()
        self._smtp_controller = None

        server, thread = self._http_server, self._http_thread
        self._http_server = None
        self._http_thread = None
        self._running = False

        remaining = max(deadline - time.monotonic(), 0.0)
        server.config.timeout_graceful_shutdown = remaining
        server.should_exit = True
        thread.join(remaining + 0.5)

        if thread.is_alive():
            server.force_exit = True
            raise ServerStopError(
                f"HTTP server did not shut down within {timeout} seconds"
            )

        logger.info("mailcatcher stopped")

    def __enter__(self) -> "MailCatcher":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    # =========================================================================
    # CAPTURED MAIL
    # =========================================================================

    def emails(self) -> List[CapturedMessage]:
        """All captured messages in arrival order (a copy)."""
        return self.store.list_all()

    def email(self, message_id: str) -> Optional[CapturedMessage]:
        """The message with the given id, or None."""
        return self.store.get(message_id)

    def clear(self) -> None:
        """Remove all captured messages."""
        self.store.clear()
