"""LLM client infrastructure."""

import logging
from typing import Any, Optional

from httpx import AsyncClient
from openai import APIError, AsyncOpenAI
from openai.types.chat import ChatCompletionMessage

from ...domain.errors import ConfigMissingError, TransportError

logger = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class LLMClient:
    """Client for interacting with LLM APIs (OpenAI-compatible)."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str,
        base_url: str = OPENROUTER_BASE_URL,
        app_url: Optional[str] = None,
        app_title: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 2000,
        http_client: Optional[AsyncClient] = None,
    ) -> None:
        """Initialize LLM client.

        Args:
            api_key: API key for the LLM service. Without it no request is sent.
            model: Model identifier.
            base_url: Base URL for the API. Defaults to OpenRouter.
            app_url: Public app URL sent as HTTP-Referer.
            app_title: Application name sent as X-Title.
            temperature: Sampling temperature. Defaults to 0.3.
            max_tokens: Completion token limit. Defaults to 2000.
            http_client: Optional httpx client for the SDK to use.
        """
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client: Optional[AsyncOpenAI] = None

        if api_key:
            headers = {}
            if app_url:
                headers["HTTP-Referer"] = app_url
            if app_title:
                headers["X-Title"] = app_title
            self._client = AsyncOpenAI(
                base_url=base_url,
                api_key=api_key,
                default_headers=headers,
                max_retries=0,
                http_client=http_client,
            )

    @property
    def configured(self) -> bool:
        """Whether an API key was provided."""
        return self._client is not None

    @property
    def openai_client(self) -> Optional[AsyncOpenAI]:
        """Underlying SDK client, for instrumentation."""
        return self._client

    async def complete(
        self,
        messages: list[dict[str, Any]],
        tools: Optional[list[dict[str, Any]]] = None,
        tool_choice: Optional[str] = None,
    ) -> ChatCompletionMessage:
        """Request one chat completion.

        Args:
            messages: Conversation so far.
            tools: Optional tool definitions for function calling.
            tool_choice: Optional tool choice mode, such as "auto".

        Returns:
            The first choice's message.

        Raises:
            ConfigMissingError: If no API key is configured.
            TransportError: If the API call fails or returns no message.
        """
        if self._client is None:
            raise ConfigMissingError("LLM API key is not configured")

        kwargs: dict[str, Any] = {}
        if tools:
            kwargs["tools"] = tools
            if tool_choice:
                kwargs["tool_choice"] = tool_choice

        try:
            completion = await self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                **kwargs,
            )
        except APIError as e:
            raise TransportError(f"LLM request failed: {e}") from e

        choices = getattr(completion, "choices", None)
        if not choices:
            raise TransportError("LLM response contained no choices")
        message = getattr(choices[0], "message", None)
        if message is None:
            raise TransportError("LLM response choice contained no message")
        return message
