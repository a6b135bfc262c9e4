"""Domain layer - Core business entities and models."""

from .errors import (
    AnalysisError,
    ConfigMissingError,
    FindOriginError,
    ParseError,
    TelegramAPIError,
    ToolExecutionError,
    TransportError,
)
from .models import (
    UNAVAILABLE_SUMMARY,
    AnalysisResult,
    SearchResult,
    SourceAnalysis,
    SourceType,
)

__all__ = [
    "AnalysisError",
    "AnalysisResult",
    "ConfigMissingError",
    "FindOriginError",
    "ParseError",
    "SearchResult",
    "SourceAnalysis",
    "SourceType",
    "TelegramAPIError",
    "ToolExecutionError",
    "TransportError",
    "UNAVAILABLE_SUMMARY",
]
