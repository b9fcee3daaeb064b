#!/usr/bin/env python3
"""Test Email Sender for a running mail catcher.

Builds a MIME message and sends it over SMTP, then optionally lists what the
catcher captured.

Usage:
    # Print the message to stdout without sending
    python scripts/send_test_email.py --from a@example.com --to b@example.com \
        --subject "Hello"

    # Send to a catcher on the default port
    python scripts/send_test_email.py --from a@example.com --to b@example.com \
        --subject "Hello" --send

    # Several recipients, custom port, with AUTH (any credentials work)
    python scripts/send_test_email.py --from a@example.com \
        --to b@example.com --to c@example.com \
        --send --smtp-port 2525 --smtp-user test --smtp-password test

    # A body with a single very long line
    python scripts/send_test_email.py --from a@example.com --to b@example.com \
        --long-line 1000000 --send
"""

import argparse
import json
import os
import smtplib
import sys
import urllib.request
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import List, Optional


def create_email(
    from_email: str,
    to_emails: List[str],
    subject: str,
    body: Optional[str] = None,
    html: Optional[str] = None,
) -> MIMEMultipart:
    """Create a MIME email message.

    Args:
        from_email: Sender email address
        to_emails: Recipient email addresses
        subject: Email subject
        body: Plain-text body (optional)
        html: HTML alternative (optional)

    Returns:
        MIMEMultipart: Email message
    """
    msg = MIMEMultipart('alternative')
    msg['From'] = from_email
    msg['To'] = ', '.join(to_emails)
    msg['Subject'] = subject
    msg['Message-ID'] = f"<test-{os.urandom(8).hex()}@mailcatcher-test>"

    if body is None:
        body = f"Test message.\n\nSubject: {subject}"

    msg.attach(MIMEText(body, 'plain'))
    if html is not None:
        msg.attach(MIMEText(html, 'html'))

    return msg


def send_email(
    msg: MIMEMultipart,
    smtp_host: str = 'localhost',
    smtp_port: int = 1025,
    smtp_user: Optional[str] = None,
    smtp_password: Optional[str] = None,
):
    """Send email via SMTP.

    Args:
        msg: Email message to send
        smtp_host: SMTP server hostname
        smtp_port: SMTP server port
        smtp_user: SMTP username (optional)
        smtp_password: SMTP password (optional)
    """
    try:
        with smtplib.SMTP(smtp_host, smtp_port) as smtp:
            if smtp_user and smtp_password:
                smtp.login(smtp_user, smtp_password)
            smtp.send_message(msg)

        print(
            f"Email sent successfully to {msg['To']} via {smtp_host}:{smtp_port}",
            file=sys.stderr
        )

    except (smtplib.SMTPException, OSError) as e:
        print(f"ERROR sending email: {e}", file=sys.stderr)
        sys.exit(1)


def list_captured(api_url: str) -> None:
    """Print the subjects the catcher currently holds."""
    with urllib.request.urlopen(f"{api_url}/api/v1/emails", timeout=5) as resp:
        data = json.load(resp)

    print(f"Captured: {data['total']} email(s)", file=sys.stderr)
    for item in data['items']:
        print(f"  {item['id']}: {item['from']} -> {item['to']} {item['subject']!r}")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='Send test emails to a mailcatcher instance',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument(
        '--from',
        dest='from_email',
        required=True,
        help='Sender email address'
    )
    parser.add_argument(
        '--to',
        dest='to_emails',
        action='append',
        required=True,
        help='Recipient email address (repeatable)'
    )
    parser.add_argument(
        '--subject',
        default='Test Email',
        help='Email subject (default: "Test Email")'
    )
    parser.add_argument(
        '--body',
        help='Email body text (optional)'
    )
    parser.add_argument(
        '--long-line',
        type=int,
        metavar='N',
        help='Add an HTML part consisting of one N-character line'
    )

    parser.add_argument(
        '--send',
        action='store_true',
        help='Send the email instead of printing it'
    )
    parser.add_argument(
        '--smtp-host',
        default='localhost',
        help='SMTP server hostname (default: localhost)'
    )
    parser.add_argument(
        '--smtp-port',
        type=int,
        default=int(os.getenv('MAILCATCHER_SMTP_PORT', '1025')),
        help='SMTP server port (default: MAILCATCHER_SMTP_PORT or 1025)'
    )
    parser.add_argument('--smtp-user', help='SMTP username')
    parser.add_argument('--smtp-password', help='SMTP password')
    parser.add_argument(
        '--api-url',
        help='After sending, list captured emails from this HTTP API '
             '(e.g. http://localhost:8025)'
    )

    args = parser.parse_args()

    html = None
    if args.long_line:
        html = "<p>" + "x" * args.long_line + "</p>"

    msg = create_email(
        from_email=args.from_email,
        to_emails=args.to_emails,
        subject=args.subject,
        body=args.body,
        html=html,
    )

    if not args.send:
        print(msg.as_string())
        return

    send_email(
        msg,
        smtp_host=args.smtp_host,
        smtp_port=args.smtp_port,
        smtp_user=args.smtp_user,
        smtp_password=args.smtp_password,
    )

    if args.api_url:
        list_captured(args.api_url)


if __name__ == '__main__':
    main()
