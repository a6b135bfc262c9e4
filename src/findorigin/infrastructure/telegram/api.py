"""Telegram Bot API client."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

from httpx import AsyncClient, TransportError as HTTPXTransportError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ...domain.errors import TelegramAPIError
from ...utils.chunking import TELEGRAM_MESSAGE_LIMIT, split_for_transport

logger = logging.getLogger(__name__)


class TelegramBotClient:
    """Minimal Bot API client for sending replies and polling updates.

    Long messages are split into several messages. Markdown that Telegram
    refuses to parse is resent as plain text.

    Usage:
        ```python
        telegram = TelegramBotClient(token, http_client)
        await telegram.send_message(chat_id, "hello")
        ```
    """

    BASE_URL = "https://api.telegram.org"

    def __init__(
        self,
        token: Optional[str],
        http_client: AsyncClient,
        max_message_length: int = TELEGRAM_MESSAGE_LIMIT,
        chunk_delay: float = 0.3,
    ) -> None:
        """Initialize Telegram client.

        Args:
            token: Bot token. If None, sending is skipped with an error log.
            http_client: HTTP client for making requests.
            max_message_length: Chunk size for long messages.
            chunk_delay: Pause between chunks in seconds.
        """
        self.token = token
        self._client = http_client
        self.max_message_length = max_message_length
        self.chunk_delay = chunk_delay

    @property
    def configured(self) -> bool:
        return bool(self.token)

    def _method_url(self, method: str) -> str:
        return f"{self.BASE_URL}/bot{self.token}/{method}"

    @retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(HTTPXTransportError),
    )
    async def _call(
        self, method: str, payload: Dict[str, Any], timeout: Optional[float] = None
    ) -> Any:
        """Call a Bot API method and return its ``result``.

        Network failures are retried; API errors are not.

        Raises:
            TelegramAPIError: If Telegram answers with ``ok: false``.
        """
        kwargs: Dict[str, Any] = {"json": payload}
        if timeout is not None:
            kwargs["timeout"] = timeout
        resp = await self._client.post(self._method_url(method), **kwargs)
        try:
            data = resp.json()
        except ValueError:
            data = {}

        if not resp.is_success or not data.get("ok"):
            description = data.get("description") or f"HTTP {resp.status_code}"
            raise TelegramAPIError(description, status_code=resp.status_code)
        return data.get("result")

    async def _send_chunk(self, chat_id: int, text: str) -> None:
        try:
            await self._call(
                "sendMessage",
                {"chat_id": chat_id, "text": text, "parse_mode": "Markdown"},
            )
        except TelegramAPIError as e:
            if not e.is_parse_error:
                raise
            logger.warning("Telegram rejected Markdown message (%s); sending plain text", e)
            await self._call("sendMessage", {"chat_id": chat_id, "text": text})

    async def send_message(self, chat_id: int, text: str) -> None:
        """Send a message, splitting it when it exceeds the length limit.

        Args:
            chat_id: Target chat.
            text: Message text in Telegram Markdown.

        Raises:
            TelegramAPIError: If a chunk is rejected for a reason other than
                Markdown parsing, or is rejected again as plain text.
        """
        if not self.token:
            logger.error("TELEGRAM_BOT_TOKEN is not set; dropping message to chat %s", chat_id)
            return

        chunks = split_for_transport(text, self.max_message_length)
        for i, chunk in enumerate(chunks):
            await self._send_chunk(chat_id, chunk)
            if i < len(chunks) - 1:
                await asyncio.sleep(self.chunk_delay)

    async def get_updates(
        self, offset: Optional[int] = None, timeout: int = 30
    ) -> List[Dict[str, Any]]:
        """Long-poll for new updates.

        Args:
            offset: Identifier of the first update to return.
            timeout: Long polling timeout in seconds.

        Returns:
            List of update objects.
        """
        payload: Dict[str, Any] = {
            "timeout": timeout,
            "allowed_updates": ["message", "edited_message"],
        }
        if offset is not None:
            payload["offset"] = offset
        result = await self._call("getUpdates", payload, timeout=timeout + 10)
        return result or []

    async def delete_webhook(self) -> None:
        """Remove any webhook so that getUpdates can be used."""
        await self._call("deleteWebhook", {"drop_pending_updates": False})
