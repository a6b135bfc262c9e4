"""Telegram bot interface."""

from .updates import handle_update, run_polling

__all__ = ["handle_update", "run_polling"]
