"""SMTP listener for mailcatcher.

Implements the aiosmtpd handler, protocol and controller that feed incoming
mail into the message store. Every connection gets its own IntakeSession;
the handler hooks translate SMTP commands into session calls.

Architecture: Hexagonal - Infrastructure adapter implementing mail intake
"""

import logging
from typing import Optional

from aiosmtpd.controller import Controller
from aiosmtpd.smtp import SMTP, AuthResult, Envelope, LoginPassword, Session

from ...config import DEFAULT_MAX_LINE_LENGTH
from ...domain.messages.ports.message_store_port import MessageStorePort
from ...exceptions import IntakeError
from ...observability.metrics import smtp_sessions_total, smtp_transactions_failed_total
from .intake_session import IntakeSession

logger = logging.getLogger(__name__)


class CatcherSMTPHandler:
    """aiosmtpd handler that captures every message into the store.

    Nothing is ever rejected: any sender, any recipient, any credentials
    (unless accept_any_credentials is turned off, in which case AUTH fails
    but unauthenticated mail is still accepted).
    """

    def __init__(self, store: MessageStorePort, accept_any_credentials: bool = True):
        """Initialize SMTP handler.

        Args:
            store: Store receiving captured messages
            accept_any_credentials: Accept every AUTH attempt (local testing only)
        """
        self.store = store
        self.accept_any_credentials = accept_any_credentials

    def new_session(self) -> IntakeSession:
        return IntakeSession(self.store, self.accept_any_credentials)

    def authenticate(
        self,
        server: "CatcherSMTP",
        session: Session,
        envelope: Envelope,
        mechanism: str,
        auth_data,
    ) -> AuthResult:
        """aiosmtpd authenticator callback."""
        username = None
        if isinstance(auth_data, LoginPassword):
            username = auth_data.login.decode("utf-8", errors="replace")

        accepted = server.intake.authenticate(mechanism, username)
        return AuthResult(success=accepted, handled=False)

    async def handle_MAIL(
        self,
        server: "CatcherSMTP",
        session: Session,
        envelope: Envelope,
        address: str,
        mail_options: list,
    ) -> str:
        # aiosmtpd refuses a nested MAIL, so this always opens a new
        # transaction. A mid-transaction HELO/EHLO has already cleared the envelope.
        server.intake.reset()
        server.intake.mail(address)
        envelope.mail_from = address
        envelope.mail_options.extend(mail_options)
        return '250 OK'

    async def handle_RCPT(
        self,
        server: "CatcherSMTP",
        session: Session,
        envelope: Envelope,
        address: str,
        rcpt_options: list,
    ) -> str:
        server.intake.rcpt(address)
        envelope.rcpt_tos.append(address)
        envelope.rcpt_options.extend(rcpt_options)
        return '250 OK'

    async def handle_DATA(
        self,
        server: "CatcherSMTP",
        session: Session,
        envelope: Envelope,
    ) -> str:
        """Handle email DATA command.

        Returns:
            str: SMTP response code and message
                '250 Message accepted for delivery' - Stored
                '451 Requested action aborted' - Transaction failed, nothing stored
        """
        try:
            server.intake.data(envelope.content)
        except IntakeError as e:
            smtp_transactions_failed_total.inc()
            logger.error(f"SMTP transaction from {session.peer} aborted: {e}")
            return '451 Requested action aborted: error in processing'

        return '250 Message accepted for delivery'

    async def handle_RSET(
        self,
        server: "CatcherSMTP",
        session: Session,
        envelope: Envelope,
    ) -> str:
        server.intake.reset()
        return '250 OK'

    async def handle_QUIT(
        self,
        server: "CatcherSMTP",
        session: Session,
        envelope: Envelope,
    ) -> str:
        server.intake.logout()
        return '221 Bye'


class CatcherSMTP(SMTP):
    """SMTP protocol instance for one connection.

    Holds the connection's IntakeSession and allows lines far longer than the
    1001 octets RFC 5321 requires.
    """

    def __init__(
        self,
        handler: CatcherSMTPHandler,
        *,
        line_length_limit: int = DEFAULT_MAX_LINE_LENGTH,
        **kwargs,
    ):
        # Must be set before SMTP.__init__ sizes the stream reader
        self.line_length_limit = line_length_limit
        super().__init__(handler, **kwargs)
        self.intake = handler.new_session()

    def connection_made(self, transport):
        super().connection_made(transport)
        smtp_sessions_total.inc()

    def connection_lost(self, error):
        if error is not None:
            logger.debug(f"SMTP connection lost: {error}")
        self.intake.logout()
        super().connection_lost(error)


class CatcherController(Controller):
    """Threaded aiosmtpd controller serving CatcherSMTP connections."""

    def __init__(
        self,
        handler: CatcherSMTPHandler,
        hostname: Optional[str] = None,
        port: int = 1025,
        *,
        domain: str = "localhost",
        line_length_limit: int = DEFAULT_MAX_LINE_LENGTH,
        data_size_limit: int = 0,
    ):
        self.line_length_limit = line_length_limit
        super().__init__(
            handler,
            hostname=hostname,
            port=port,
            server_hostname=domain,
            data_size_limit=data_size_limit,
            authenticator=handler.authenticate,
            auth_require_tls=False,
        )

    def factory(self):
        return CatcherSMTP(
            self.handler,
            line_length_limit=self.line_length_limit,
            **self.SMTP_kwargs,
        )
