"""AI-driven source discovery - Core business logic."""

import json
import logging
from enum import Enum
from typing import Any, Optional, Sequence

from openai.types.chat import ChatCompletionMessage

from ..domain.errors import AnalysisError, ParseError, ToolExecutionError
from ..domain.models import AnalysisResult
from ..infrastructure.cache import ANALYSIS_TTL_SECONDS, TTLCache, analysis_cache_key
from ..infrastructure.llm.client import LLMClient
from ..infrastructure.llm.parser import (
    LLMResponseParser,
    ParseFailure,
    build_user_prompt,
    llm_system_prompt,
)
from ..infrastructure.search.invoker import SearchToolInvoker
from ..utils.sanitization import sanitize_query

logger = logging.getLogger(__name__)

WEB_SEARCH_TOOL = "web_search"
DEFAULT_TOOL_MAX_RESULTS = 3


class AnalysisState(str, Enum):
    """States of one analysis exchange with the model."""

    NO_API_KEY = "no_api_key"
    CACHE_HIT = "cache_hit"
    FIRST_CALL = "first_call"
    PARSE_DIRECT = "parse_direct"
    EXECUTE_TOOLS = "execute_tools"
    SECOND_CALL = "second_call"
    PARSE = "parse"
    FAILED = "failed"
    EMPTY_RESULT = "empty_result"


def web_search_tool_definition() -> dict[str, Any]:
    """Get function calling tool definition for web search.

    Returns:
        Tool definition dictionary for function calling.
    """
    return {
        "type": "function",
        "function": {
            "name": WEB_SEARCH_TOOL,
            "description": "Search the web for pages related to a claim. Use this to find the original source of a statement and evidence confirming or refuting it.",
            "parameters": {
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "The search query. Include the key facts, names and dates from the claim.",
                    },
                    "max_results": {
                        "type": "integer",
                        "description": "Number of search results to return. Default is 3.",
                        "default": DEFAULT_TOOL_MAX_RESULTS,
                        "minimum": 1,
                        "maximum": 10,
                    },
                },
                "required": ["query"],
            },
        },
    }


class AIAnalyzer:
    """Finds and scores sources for a claim with a tool-calling LLM.

    The model gets one tool, ``web_search``. When it asks for searches they
    are run one at a time and sent back in a second request; otherwise the
    first answer is final. Any failure yields the unavailable sentinel, so
    ``analyze`` never raises.
    """

    def __init__(
        self,
        llm_client: LLMClient,
        search_invoker: SearchToolInvoker,
        cache: TTLCache,
        response_parser: Optional[LLMResponseParser] = None,
        cache_ttl: float = ANALYSIS_TTL_SECONDS,
    ) -> None:
        """Initialize the analyzer.

        Args:
            llm_client: Client for LLM interactions.
            search_invoker: Search backend for the web_search tool.
            cache: Shared TTL cache for finished analyses.
            response_parser: Parser for LLM responses.
            cache_ttl: TTL for cached analyses in seconds. Defaults to 30 minutes.
        """
        self.llm_client = llm_client
        self.search_invoker = search_invoker
        self.cache = cache
        self.response_parser = response_parser or LLMResponseParser()
        self.cache_ttl = cache_ttl

    async def analyze(self, text: str) -> AnalysisResult:
        """Discover and score sources for a claim.

        Args:
            text: Claim text to analyze.

        Returns:
            AnalysisResult with sources sorted by relevance, or the
            unavailable sentinel.
        """
        if not self.llm_client.configured:
            logger.warning(
                "AI API key is not configured; state=%s -> %s",
                AnalysisState.NO_API_KEY.value,
                AnalysisState.EMPTY_RESULT.value,
            )
            return AnalysisResult.unavailable()

        cache_key = analysis_cache_key(text)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug("Cache hit for AI analysis; state=%s", AnalysisState.CACHE_HIT.value)
            return cached

        logger.info("Starting AI analysis (%d chars)", len(text))
        try:
            result = await self._run_exchange(text)
        except ParseError as e:
            logger.error(
                "Could not parse AI response (%s); state=%s -> %s; raw=%r",
                e,
                AnalysisState.FAILED.value,
                AnalysisState.EMPTY_RESULT.value,
                e.raw_text[:2000],
            )
            return AnalysisResult.unavailable()
        except AnalysisError as e:
            logger.error(
                "AI analysis failed: %s; state=%s -> %s",
                e,
                AnalysisState.FAILED.value,
                AnalysisState.EMPTY_RESULT.value,
            )
            return AnalysisResult.unavailable()

        self.cache.set(cache_key, result, ttl=self.cache_ttl)
        logger.info("AI analysis completed (%d sources)", len(result.sources))
        return result

    async def _run_exchange(self, text: str) -> AnalysisResult:
        """Drive the tool-calling exchange from FIRST_CALL to a parsed result.

        Raises:
            AnalysisError: On transport or parse failures.
        """
        messages: list[dict[str, Any]] = [
            {"role": "system", "content": llm_system_prompt()},
            {"role": "user", "content": build_user_prompt(text)},
        ]
        first: Optional[ChatCompletionMessage] = None
        content = ""
        state = AnalysisState.FIRST_CALL

        while True:
            logger.debug("Analysis state: %s", state.value)

            if state is AnalysisState.FIRST_CALL:
                first = await self.llm_client.complete(
                    messages,
                    tools=[web_search_tool_definition()],
                    tool_choice="auto",
                )
                state = (
                    AnalysisState.EXECUTE_TOOLS
                    if first.tool_calls
                    else AnalysisState.PARSE_DIRECT
                )

            elif state is AnalysisState.PARSE_DIRECT:
                content = first.content or ""
                state = AnalysisState.PARSE

            elif state is AnalysisState.EXECUTE_TOOLS:
                executed = await self._execute_tool_calls(first.tool_calls)
                if executed:
                    messages.append(self._assistant_message(first, [tc for tc, _ in executed]))
                    messages.extend(
                        {"role": "tool", "tool_call_id": tc.id, "content": content}
                        for tc, content in executed
                    )
                state = AnalysisState.SECOND_CALL

            elif state is AnalysisState.SECOND_CALL:
                second = await self.llm_client.complete(messages)
                content = second.content or ""
                state = AnalysisState.PARSE

            elif state is AnalysisState.PARSE:
                outcome = self.response_parser.parse(content)
                if isinstance(outcome, ParseFailure):
                    raise ParseError(outcome.reason, raw_text=outcome.raw_text)
                return outcome.result

    @staticmethod
    def _assistant_message(
        message: ChatCompletionMessage, tool_calls: Sequence[Any]
    ) -> dict[str, Any]:
        """Echo the model's turn, listing only the calls that get a tool reply."""
        return {
            "role": "assistant",
            "content": message.content,
            "tool_calls": [
                {
                    "id": tc.id,
                    "type": "function",
                    "function": {
                        "name": tc.function.name,
                        "arguments": tc.function.arguments,
                    },
                }
                for tc in tool_calls
            ],
        }

    async def _execute_tool_calls(self, tool_calls: Sequence[Any]) -> list[tuple[Any, str]]:
        """Run the requested tool calls in order.

        A call that fails is logged and left out of the returned pairs.

        Returns:
            ``(tool_call, content)`` for every call that succeeded.
        """
        executed = []
        for tool_call in tool_calls:
            try:
                content = await self._execute_tool_call(tool_call)
            except ToolExecutionError as e:
                logger.warning("Tool call %s omitted: %s", getattr(tool_call, "id", None), e)
                continue
            executed.append((tool_call, content))
        return executed

    async def _execute_tool_call(self, tool_call: Any) -> str:
        """Handle one web_search call.

        Returns:
            JSON string of search results.

        Raises:
            ToolExecutionError: If the call cannot be executed.
        """
        if not getattr(tool_call, "id", None):
            raise ToolExecutionError("Tool call has no id")
        function = getattr(tool_call, "function", None)
        function_name = getattr(function, "name", None)
        if function_name != WEB_SEARCH_TOOL:
            raise ToolExecutionError(f"Unknown tool function: {function_name}")

        try:
            args = json.loads(function.arguments or "{}")
        except (json.JSONDecodeError, TypeError) as e:
            raise ToolExecutionError(f"Malformed tool arguments: {e}") from e
        if not isinstance(args, dict):
            raise ToolExecutionError("Tool arguments are not an object")

        query = sanitize_query(args.get("query", ""))
        if not query:
            raise ToolExecutionError("Tool call has an empty query")

        max_results = args.get("max_results", args.get("maxResults"))
        try:
            max_results = int(max_results) if max_results is not None else DEFAULT_TOOL_MAX_RESULTS
        except (TypeError, ValueError, OverflowError):
            max_results = DEFAULT_TOOL_MAX_RESULTS
        max_results = max(1, max_results)

        logger.info("Model requested web search: %r (max_results=%d)", query, max_results)
        results = await self.search_invoker.search_query(query, max_results=max_results)

        return json.dumps(
            {
                "query": query,
                "results": [r.model_dump(mode="json", by_alias=True) for r in results],
            },
            ensure_ascii=False,
        )
