from .intake_session import IntakeSession, SessionState
from .smtp_handler import CatcherController, CatcherSMTP, CatcherSMTPHandler

__all__ = [
    "CatcherController",
    "CatcherSMTP",
    "CatcherSMTPHandler",
    "IntakeSession",
    "SessionState",
]
