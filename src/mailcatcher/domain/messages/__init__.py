"""Captured message domain: records, header scan, and the store port."""

from .captured_message import CapturedMessage, DraftMessage
from .headers import extract_header, parse_subject

__all__ = ["CapturedMessage", "DraftMessage", "extract_header", "parse_subject"]
