"""Telegram infrastructure."""

from .api import TelegramBotClient
from .post_extractor import TelegramPostExtractor, is_telegram_link, parse_telegram_link

__all__ = [
    "TelegramBotClient",
    "TelegramPostExtractor",
    "is_telegram_link",
    "parse_telegram_link",
]
