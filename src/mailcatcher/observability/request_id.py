"""Correlation ids for HTTP API log lines.

RequestIDMiddleware binds one id per API call; RequestIDFilter stamps it on
every record logged while that call runs. SMTP intake runs on the aiosmtpd
thread outside any API call and is logged with NO_REQUEST_ID.
"""

import uuid
from contextvars import ContextVar, Token
from typing import Optional

NO_REQUEST_ID = "no-request-id"

_current_request_id: ContextVar[Optional[str]] = ContextVar(
    "mailcatcher_request_id", default=None
)


def generate_request_id() -> str:
    """New id for an API call that arrived without an X-Request-ID header."""
    return uuid.uuid4().hex


def get_request_id() -> str:
    return _current_request_id.get() or NO_REQUEST_ID


def set_request_id(request_id: str) -> Token:
    """Bind request_id to the current API call.

    Returns:
        Token: Pass to reset_request_id once the response is sent
    """
    return _current_request_id.set(request_id)


def reset_request_id(token: Token) -> None:
    _current_request_id.reset(token)
