"""Observability: logging setup, request correlation, metrics, health."""

from .logging_config import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
