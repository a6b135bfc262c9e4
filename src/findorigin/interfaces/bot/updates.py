"""Telegram update handling and long-polling loop."""

import asyncio
import logging
from typing import Any, Dict, Optional

from httpx import HTTPError

from ...application.processor import MessageProcessor
from ...domain.errors import TelegramAPIError
from ...infrastructure.telegram.api import TelegramBotClient

logger = logging.getLogger(__name__)


async def handle_update(update: Dict[str, Any], processor: MessageProcessor) -> Dict[str, Any]:
    """Process one Telegram update payload (webhook body or polled update).

    Only ``message`` and ``edited_message`` updates with text are handled;
    everything else is acknowledged and ignored.

    Returns:
        Always ``{"ok": True}`` so Telegram does not redeliver the update.
    """
    try:
        msg = update.get("message") or update.get("edited_message")
        if not isinstance(msg, dict):
            return {"ok": True}

        chat_id = (msg.get("chat") or {}).get("id")
        text = msg.get("text")
        if not chat_id or not text:
            return {"ok": True}

        await processor.process(chat_id, text)
    except Exception:
        logger.exception("Update handling failed")
    return {"ok": True}


async def run_polling(
    telegram: TelegramBotClient,
    processor: MessageProcessor,
    poll_timeout: int = 30,
    error_backoff: float = 5.0,
    max_updates: Optional[int] = None,
) -> None:
    """Poll Telegram for updates and handle them one at a time.

    Args:
        telegram: Bot API client.
        processor: Message processor.
        poll_timeout: Long polling timeout in seconds.
        error_backoff: Pause after a failed poll in seconds.
        max_updates: Stop after this many updates (for tests); None runs forever.
    """
    await telegram.delete_webhook()
    logger.info("Polling Telegram for updates")

    offset: Optional[int] = None
    handled = 0
    while max_updates is None or handled < max_updates:
        try:
            updates = await telegram.get_updates(offset=offset, timeout=poll_timeout)
        except (TelegramAPIError, HTTPError) as e:
            logger.error("Polling failed: %s", e)
            await asyncio.sleep(error_backoff)
            continue

        for update in updates:
            offset = int(update.get("update_id", 0)) + 1
            await handle_update(update, processor)
            handled += 1
