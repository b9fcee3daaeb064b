"""Command-line entry point for the standalone mail catcher.

Usage:
    mailcatcher [--smtp-port PORT] [--http-port PORT] [--host HOST] [--verbose]
    mailcatcher --version

Ports: command-line flags win over MAILCATCHER_SMTP_PORT /
MAILCATCHER_HTTP_PORT, which win over the defaults (1025 / 8025).
"""

import argparse
import logging
import signal
import sys
import threading
from typing import List, Optional

from .config import Settings, get_settings
from .exceptions import ServerStartError, ServerStopError
from .observability.logging_config import configure_logging
from .server import MailCatcher
from .version import __version__

logger = logging.getLogger("mailcatcher")

SHUTDOWN_TIMEOUT = 10.0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mailcatcher",
        description="Capture SMTP mail in memory and serve it over a JSON API.",
    )
    parser.add_argument(
        "--smtp-port", type=int, default=None,
        help="SMTP server port (env MAILCATCHER_SMTP_PORT, default 1025)",
    )
    parser.add_argument(
        "--http-port", type=int, default=None,
        help="HTTP API server port (env MAILCATCHER_HTTP_PORT, default 8025)",
    )
    parser.add_argument(
        "--host", default=None,
        help="Interface to bind (env MAILCATCHER_HOST, default 0.0.0.0)",
    )
    parser.add_argument(
        "--verbose", action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--version", action="store_true",
        help="Show version information and exit",
    )
    return parser


def resolve_settings(args: argparse.Namespace, settings: Settings) -> Settings:
    """Overlay explicitly passed flags on environment-derived settings."""
    overrides = {}
    if args.smtp_port is not None:
        overrides["SMTP_PORT"] = args.smtp_port
    if args.http_port is not None:
        overrides["HTTP_PORT"] = args.http_port
    if args.host is not None:
        overrides["HOST"] = args.host
    if args.verbose:
        overrides["LOG_LEVEL"] = "DEBUG"
    return settings.model_copy(update=overrides)


def wait_for_shutdown_signal() -> None:
    """Block until SIGINT or SIGTERM."""
    stop_requested = threading.Event()

    def _handle(signum, frame):
        stop_requested.set()

    signal.signal(signal.SIGINT, _handle)
    signal.signal(signal.SIGTERM, _handle)
    while not stop_requested.wait(0.5):
        pass


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.version:
        print(f"mailcatcher {__version__}")
        return 0

    # Configure logging first so invalid env values are reported
    configure_logging(level="DEBUG" if args.verbose else "INFO")
    settings = resolve_settings(args, get_settings())
    configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

    logger.info(f"Starting mailcatcher {__version__}")
    logger.info(f"SMTP server will listen on port {settings.SMTP_PORT}")
    logger.info(f"HTTP API will listen on port {settings.HTTP_PORT}")

    server = MailCatcher.from_settings(settings, access_log=args.verbose)
    try:
        server.start()
    except ServerStartError as e:
        logger.error(f"Failed to start server: {e}")
        return 1

    logger.info(f"Web interface: {server.http_url}/api/v1/emails")
    logger.info("Press Ctrl+C to stop")

    wait_for_shutdown_signal()
    logger.info("Shutting down...")

    try:
        server.stop(timeout=SHUTDOWN_TIMEOUT)
    except ServerStopError as e:
        logger.error(f"Error during shutdown: {e}")
        return 1

    logger.info("Server stopped")
    return 0


def run() -> None:
    sys.exit(main())
