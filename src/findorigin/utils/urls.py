"""URL display helpers for chat messages."""

from typing import Optional
from urllib.parse import urlparse


def _truncate(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    if max_length <= 3:
        return text[:max_length]
    return text[: max_length - 3] + "..."


def get_domain(url: str) -> str:
    """Return the hostname without a leading ``www.``, or the input if unparsable."""
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return url
    if not hostname:
        return url
    return hostname[4:] if hostname.startswith("www.") else hostname


def shorten_url(url: str, max_length: int = 50) -> str:
    """Shorten a URL for display as domain plus the start of the path.

    Args:
        url: Full URL.
        max_length: Upper bound on the returned length.

    Returns:
        The URL itself when short enough, otherwise a shortened form.
    """
    if not url or not isinstance(url, str):
        return ""
    if len(url) <= max_length:
        return url

    try:
        parsed = urlparse(url)
    except ValueError:
        return _truncate(url, max_length)
    if not parsed.hostname:
        return _truncate(url, max_length)

    domain = get_domain(url)
    path = parsed.path
    short_path = path[:20] + "..." if len(path) > 20 else path
    return _truncate(f"{domain}{short_path}", max_length)


def format_url_for_telegram(url: str, display_text: Optional[str] = None) -> str:
    """Render a Markdown link showing a short text but pointing at the full URL."""
    short_text = display_text or shorten_url(url, 40)
    return f"[{short_text}]({url})"
