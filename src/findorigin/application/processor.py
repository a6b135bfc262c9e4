"""Handling of one incoming chat message end to end."""

import logging
import time

from ..domain.errors import TransportError
from ..infrastructure.telegram.api import TelegramBotClient
from ..infrastructure.telegram.post_extractor import TelegramPostExtractor, is_telegram_link
from .analyzer import AIAnalyzer
from .formatter import format_final_message

logger = logging.getLogger(__name__)

MSG_STARTED = "🔍 Analyzing your request..."
MSG_EXTRACTING = "📥 Extracting text from the Telegram post..."
MSG_EXTRACT_EMPTY = "❌ Could not extract text from the post. Processing the original message."
MSG_EXTRACT_FAILED = "⚠️ Error while extracting the post. Processing the original message."
MSG_SEARCHING = "🤖 Searching and analyzing sources with AI..."
MSG_FAILED = "❌ An error occurred while processing your request. Please try again later."


class MessageProcessor:
    """Turns a chat message into a source analysis reply.

    Progress messages are sent along the way. The chat always gets an
    answer: on any internal error an apology is sent instead.
    """

    def __init__(
        self,
        analyzer: AIAnalyzer,
        telegram: TelegramBotClient,
        post_extractor: TelegramPostExtractor,
    ) -> None:
        self.analyzer = analyzer
        self.telegram = telegram
        self.post_extractor = post_extractor

    async def _resolve_text(self, chat_id: int, message_text: str) -> str:
        """Replace a Telegram post link with the post's text when possible."""
        if not is_telegram_link(message_text):
            return message_text

        await self.telegram.send_message(chat_id, MSG_EXTRACTING)
        try:
            post_text = await self.post_extractor.extract(message_text)
        except TransportError:
            logger.exception("Error extracting Telegram post")
            await self.telegram.send_message(chat_id, MSG_EXTRACT_FAILED)
            return message_text

        if not post_text:
            await self.telegram.send_message(chat_id, MSG_EXTRACT_EMPTY)
            return message_text
        return post_text

    async def process(self, chat_id: int, message_text: str) -> None:
        """Analyze a message and reply with the formatted result.

        Args:
            chat_id: Chat to reply to.
            message_text: Claim text or a link to a Telegram post.
        """
        start = time.monotonic()
        logger.info("Processing message (chat_id=%s, length=%d)", chat_id, len(message_text))

        try:
            await self.telegram.send_message(chat_id, MSG_STARTED)
            text = await self._resolve_text(chat_id, message_text)

            await self.telegram.send_message(chat_id, MSG_SEARCHING)
            analysis = await self.analyzer.analyze(text)

            await self.telegram.send_message(chat_id, format_final_message(text, analysis))
            logger.info(
                "Message processed successfully (chat_id=%s, duration=%.2fs)",
                chat_id,
                time.monotonic() - start,
            )
        except Exception:
            logger.exception("Error processing message (chat_id=%s)", chat_id)
            try:
                await self.telegram.send_message(chat_id, MSG_FAILED)
            except Exception:
                logger.exception("Could not deliver error message (chat_id=%s)", chat_id)
