"""Utility functions and helpers."""

from .chunking import TELEGRAM_MESSAGE_LIMIT, split_for_transport
from .sanitization import sanitize_query
from .urls import format_url_for_telegram, get_domain, shorten_url

__all__ = [
    "TELEGRAM_MESSAGE_LIMIT",
    "format_url_for_telegram",
    "get_domain",
    "sanitize_query",
    "shorten_url",
    "split_for_transport",
]
