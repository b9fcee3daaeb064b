"""Exception hierarchy for mailcatcher.

Only ServerStartError is fatal for the standalone process; every other error
is confined to the SMTP connection or HTTP request that raised it.
"""


class MailCatcherError(Exception):
    """Base exception for mailcatcher."""
    pass


class ServerStartError(MailCatcherError):
    """A listener could not be bound (port in use, permission denied)."""
    pass


class ServerStopError(MailCatcherError):
    """Shutdown did not complete before its deadline."""
    pass


class IntakeError(MailCatcherError):
    """Base exception for SMTP intake session failures."""
    pass


class BodyReadError(IntakeError):
    """Reading the DATA payload failed; the transaction was aborted."""
    pass


class SessionClosedError(IntakeError):
    """A command arrived after the session logged out."""
    pass
