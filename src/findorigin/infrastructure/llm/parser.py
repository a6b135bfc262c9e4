"""LLM prompts and response parsing."""

import json
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from ...domain.models import AnalysisResult, SourceAnalysis, SourceType

logger = logging.getLogger(__name__)

DEFAULT_SCORE = 50
DEFAULT_SUMMARY = "Analysis complete."


def llm_system_prompt() -> str:
    """Return the system prompt for source discovery.

    Returns:
        System prompt instructing the model to search and emit JSON.
    """
    return """
You are an assistant that finds the original sources of a claim and rates how well each source matches it.

1. Use the web_search function to find pages that confirm, refute or first reported the claim. You may call it several times with different queries.
2. Read the search results carefully. Only cite URLs that appeared in the results.
3. Return a single valid JSON object (only JSON) with the following schema:

{
  "sources": [
    {
      "title": "Source title",
      "url": "https://...",
      "snippet": "Short excerpt from the source",
      "relevanceScore": 85,
      "confidence": 80,
      "matchDescription": "How the source matches the claim (1-2 sentences)",
      "sourceType": "official|news|research|blog"
    }
  ],
  "summary": "Overall conclusion (1-2 sentences)"
}

- relevanceScore: 0-100, how well the source matches the claim (0 = unrelated, 100 = same claim).
- confidence: 0-100, how certain you are about the relevanceScore.
- Only return JSON, without markdown formatting or commentary.
"""


def build_user_prompt(text: str) -> str:
    """Embed the claim text in the user prompt."""
    return (
        "Find sources for the following text and rate their relevance.\n\n"
        f'Text:\n"{text}"'
    )


@dataclass(frozen=True)
class ParsedAnalysis:
    """Successful parse of model output."""

    result: AnalysisResult


@dataclass(frozen=True)
class ParseFailure:
    """Model output that could not be decoded."""

    raw_text: str
    reason: str


ParseOutcome = Union[ParsedAnalysis, ParseFailure]


def _as_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip()
    return str(value).strip()


def _as_score(value: Any, default: int = DEFAULT_SCORE) -> int:
    """Coerce a 0-100 score, clamping out-of-range numbers."""
    if isinstance(value, bool) or value is None:
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return max(0, min(100, int(round(number))))


def _as_source_type(value: Any) -> Optional[SourceType]:
    if value is None or value == "":
        return None
    try:
        return SourceType(_as_str(value).lower())
    except ValueError:
        return SourceType.UNKNOWN


class LLMResponseParser:
    """Parser for LLM responses into AnalysisResult objects."""

    @staticmethod
    def _extract_json(text: str) -> Optional[str]:
        """Cut the text down to the span between the first '{' and last '}'.

        This drops markdown code fences and any commentary around the object.
        """
        start = text.find("{")
        end = text.rfind("}")
        if start == -1 or end < start:
            return None
        return text[start : end + 1]

    @staticmethod
    def _build_source(item: Dict[str, Any]) -> SourceAnalysis:
        return SourceAnalysis(
            url=_as_str(item.get("url") or item.get("link")),
            title=_as_str(item.get("title")),
            snippet=_as_str(item.get("snippet")),
            relevance_score=_as_score(item.get("relevanceScore")),
            confidence=_as_score(item.get("confidence")),
            match_description=_as_str(item.get("matchDescription")),
            source_type=_as_source_type(item.get("sourceType")),
        )

    def parse(self, response_text: str) -> ParseOutcome:
        """Parse raw LLM output.

        Args:
            response_text: Raw text response from LLM.

        Returns:
            ParsedAnalysis with sources sorted by relevance, or ParseFailure.
        """
        logger.debug("LLM response (truncated 1000 chars): %s", response_text[:1000])
        json_str = self._extract_json(response_text or "")
        if json_str is None:
            return ParseFailure(raw_text=response_text, reason="no JSON object found")

        try:
            obj = json.loads(json_str)
        except json.JSONDecodeError as e:
            return ParseFailure(raw_text=response_text, reason=f"invalid JSON: {e}")

        if not isinstance(obj, dict):
            return ParseFailure(raw_text=response_text, reason="top-level JSON is not an object")

        raw_sources = obj.get("sources")
        if not isinstance(raw_sources, list):
            raw_sources = []

        sources: List[SourceAnalysis] = []
        for item in raw_sources:
            if not isinstance(item, dict):
                logger.warning("Skipping non-object source entry: %r", item)
                continue
            try:
                sources.append(self._build_source(item))
            except ValidationError as e:
                logger.warning("Skipping invalid source entry %r: %s", item, e)

        # list.sort is stable, ties keep the model's order
        sources.sort(key=lambda s: s.relevance_score, reverse=True)

        summary = _as_str(obj.get("summary")) or DEFAULT_SUMMARY
        return ParsedAnalysis(result=AnalysisResult(sources=tuple(sources), summary=summary))
