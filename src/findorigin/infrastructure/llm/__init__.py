"""LLM infrastructure implementations."""

from .client import LLMClient
from .parser import (
    LLMResponseParser,
    ParsedAnalysis,
    ParseFailure,
    build_user_prompt,
    llm_system_prompt,
)

__all__ = [
    "LLMClient",
    "LLMResponseParser",
    "ParseFailure",
    "ParsedAnalysis",
    "build_user_prompt",
    "llm_system_prompt",
]
