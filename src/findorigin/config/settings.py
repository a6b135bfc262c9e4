"""Application settings and configuration management."""

import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv


class Settings:
    """Application configuration loaded from environment variables."""

    def __init__(self) -> None:
        """Load environment variables from .env file."""
        load_dotenv()

    @property
    def openrouter_api_key(self) -> Optional[str]:
        """OpenRouter API key for LLM access."""
        return os.getenv("OPENROUTER_API_KEY") or None

    @property
    def openrouter_base_url(self) -> str:
        """Base URL of the OpenAI-compatible chat completion API."""
        return os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1")

    @property
    def ai_model(self) -> str:
        """LLM model identifier."""
        return os.getenv("AI_MODEL", "google/gemma-3n-e2b-it")

    @property
    def app_url(self) -> str:
        """Public app URL sent as the HTTP-Referer header."""
        return os.getenv("APP_URL", "https://findorigin.vercel.app")

    @property
    def app_title(self) -> str:
        """Application title sent as the X-Title header."""
        return os.getenv("APP_TITLE", "FindOrigin Bot")

    @property
    def search_api_key(self) -> Optional[str]:
        """Google Custom Search API key."""
        return os.getenv("SEARCH_API_KEY") or None

    @property
    def google_cse_id(self) -> Optional[str]:
        """Google Custom Search engine identifier."""
        return os.getenv("GOOGLE_CSE_ID") or None

    @property
    def telegram_bot_token(self) -> Optional[str]:
        """Telegram Bot API token."""
        return os.getenv("TELEGRAM_BOT_TOKEN") or None

    @property
    def http_timeout_seconds(self) -> float:
        """HTTP client timeout in seconds."""
        return float(os.getenv("HTTP_TIMEOUT_SECONDS", "20.0"))

    @property
    def search_cache_ttl(self) -> int:
        """Search result cache TTL in seconds."""
        return int(os.getenv("SEARCH_CACHE_TTL", "600"))

    @property
    def analysis_cache_ttl(self) -> int:
        """AI analysis cache TTL in seconds."""
        return int(os.getenv("ANALYSIS_CACHE_TTL", "1800"))

    @property
    def cache_cleanup_interval(self) -> int:
        """Interval between background cache sweeps in seconds."""
        return int(os.getenv("CACHE_CLEANUP_INTERVAL", "600"))

    @property
    def search_max_results(self) -> int:
        """Maximum number of search results handed to the model per call."""
        return int(os.getenv("SEARCH_MAX_RESULTS", "3"))

    @property
    def log_level(self) -> str:
        """Root log level."""
        return os.getenv("LOG_LEVEL", "INFO").upper()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance (singleton pattern)."""
    return Settings()
