"""Extraction of post text from public Telegram channel links."""

import logging
import re
from typing import Optional, Tuple

from bs4 import BeautifulSoup
from httpx import AsyncClient, HTTPError

from ...domain.errors import TransportError

logger = logging.getLogger(__name__)

TELEGRAM_LINK_RE = re.compile(r"(?:https?://)?(?:t\.me|telegram\.me)/([a-zA-Z0-9_]+)/(\d+)")

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


def parse_telegram_link(text: str) -> Optional[Tuple[str, str]]:
    """Return ``(channel, post_id)`` for the first post link in text."""
    match = TELEGRAM_LINK_RE.search(text)
    if not match:
        return None
    return match.group(1), match.group(2)


def is_telegram_link(text: str) -> bool:
    """Check whether text contains a link to a Telegram post."""
    return parse_telegram_link(text) is not None


class TelegramPostExtractor:
    """Scrapes the text of a public channel post from its t.me web page.

    Telegram has no public API for reading channel posts, so this only
    works for public channels.
    """

    WEB_URL = "https://t.me"

    def __init__(self, http_client: AsyncClient) -> None:
        self._client = http_client

    async def extract(self, text: str) -> Optional[str]:
        """Fetch the post referenced in text.

        Args:
            text: Message containing a t.me post link.

        Returns:
            Post text, or None when the link is missing or the page has no text.

        Raises:
            TransportError: If the page cannot be fetched.
        """
        link = parse_telegram_link(text)
        if link is None:
            return None
        channel, post_id = link

        web_url = f"{self.WEB_URL}/{channel}/{post_id}"
        try:
            resp = await self._client.get(
                web_url,
                headers={"User-Agent": USER_AGENT},
                follow_redirects=True,
            )
        except HTTPError as e:
            raise TransportError(f"Failed to fetch {web_url}: {e}") from e

        if not resp.is_success:
            logger.warning("Telegram post page %s returned HTTP %d", web_url, resp.status_code)
            return None

        soup = BeautifulSoup(resp.text, "html.parser")

        node = soup.select_one(".tgme_widget_message_text")
        if node is not None:
            post_text = node.get_text().strip()
            if post_text:
                return post_text

        meta = soup.find("meta", property="og:description")
        if meta is not None and meta.get("content"):
            return meta["content"].strip()

        return None
