"""Prometheus metrics for mailcatcher.

Defines operational counters exposed on the /metrics endpoint.
"""

from prometheus_client import Counter

emails_captured_total = Counter(
    "mailcatcher_emails_captured_total",
    "Total number of messages captured over SMTP",
)

emails_cleared_total = Counter(
    "mailcatcher_emails_cleared_total",
    "Total number of messages removed by bulk clears",
)

smtp_sessions_total = Counter(
    "mailcatcher_smtp_sessions_total",
    "Total SMTP connections accepted",
)

smtp_transactions_failed_total = Counter(
    "mailcatcher_smtp_transactions_failed_total",
    "SMTP transactions aborted before the message was stored",
)
