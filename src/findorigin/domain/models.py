"""Core domain models for source discovery and analysis."""

from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

UNAVAILABLE_SUMMARY = "AI-analysis unavailable (the AI service could not be used)."


class SourceType(str, Enum):
    """Kind of website a source comes from, used for ranking."""

    OFFICIAL = "official"
    NEWS = "news"
    RESEARCH = "research"
    BLOG = "blog"
    UNKNOWN = "unknown"


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class SearchResult(_CamelModel):
    """Result from a web search query."""

    title: str
    url: str
    snippet: str = ""
    source_type: Optional[SourceType] = None


class SourceAnalysis(_CamelModel):
    """A candidate source scored by the model against the claim."""

    url: str = ""
    title: str = ""
    snippet: str = ""
    relevance_score: int = Field(default=50, ge=0, le=100)
    confidence: int = Field(default=50, ge=0, le=100)
    match_description: str = ""
    source_type: Optional[SourceType] = None


class AnalysisResult(_CamelModel):
    """Scored sources plus a short synthesis for one claim."""

    sources: Tuple[SourceAnalysis, ...] = ()
    summary: str

    @classmethod
    def unavailable(cls) -> "AnalysisResult":
        """Sentinel result used whenever the AI backend cannot be used."""
        return cls(sources=(), summary=UNAVAILABLE_SUMMARY)

    @property
    def is_unavailable(self) -> bool:
        """True for the sentinel result."""
        return self.summary == UNAVAILABLE_SUMMARY and not self.sources
