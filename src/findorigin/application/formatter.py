"""Telegram message formatting for analysis results."""

from ..domain.models import AnalysisResult, SourceAnalysis
from ..utils.urls import format_url_for_telegram

TOP_SOURCES = 3
UNAVAILABLE_MARKER = "unavailable"

NO_SOURCES_MESSAGE = (
    "❌ *No sources found*\n\n"
    "Could not find relevant sources for the provided text."
)

SOURCE_TYPE_EMOJI = {
    "official": "🏛️",
    "news": "📰",
    "research": "🔬",
    "blog": "📝",
}


def truncate_text(text: str, max_length: int) -> str:
    """Cut text to max_length, ending with "..." when shortened."""
    if len(text) <= max_length:
        return text
    if max_length <= 3:
        return text[: max(0, max_length)]
    return text[: max_length - 3] + "..."


def relevance_emoji(score: int) -> str:
    if score >= 80:
        return "🟢"
    if score >= 60:
        return "🟡"
    if score >= 40:
        return "🟠"
    return "🔴"


def confidence_emoji(confidence: int) -> str:
    if confidence >= 80:
        return "✅"
    if confidence >= 60:
        return "⚠️"
    return "❓"


def _format_source(index: int, source: SourceAnalysis) -> str:
    lines = [
        f"{index}. {relevance_emoji(source.relevance_score)} *{source.title or source.url}*",
        f"   {format_url_for_telegram(source.url)}",
    ]
    if source.snippet:
        lines.append(f"   {truncate_text(source.snippet, 150)}")

    lines.append("")
    lines.append(
        f"   {confidence_emoji(source.confidence)} *Relevance:* {source.relevance_score}%"
        f" | *Confidence:* {source.confidence}%"
    )

    description = source.match_description
    if description and UNAVAILABLE_MARKER not in description.lower():
        lines.append(f"   📌 {truncate_text(description, 200)}")

    if source.source_type:
        type_name = source.source_type.value
        lines.append(f"   {SOURCE_TYPE_EMOJI.get(type_name, '🔗')} Type: {type_name}")

    return "\n".join(lines) + "\n"


def format_final_message(original_text: str, analysis: AnalysisResult) -> str:
    """Format the final Telegram reply for an analysis.

    Sources without a URL are not shown. When nothing is left the fixed
    "no sources" message is returned, whatever the summary says.

    Args:
        original_text: Claim text that was analyzed.
        analysis: Result to render.

    Returns:
        Message text using Telegram Markdown.
    """
    sources = [s for s in analysis.sources if s.url]
    if not sources:
        return NO_SOURCES_MESSAGE

    parts = [
        "✅ *Source analysis results*\n",
        f"📝 *Original text:*\n{truncate_text(original_text, 200)}\n",
        f"📊 *Sources found:* {len(sources)}\n",
    ]

    summary = analysis.summary
    if summary and UNAVAILABLE_MARKER not in summary.lower():
        parts.append(f"💡 *Summary:*\n{summary}\n")

    parts.append("🔗 *Sources:*\n")
    for index, source in enumerate(sources[:TOP_SOURCES], 1):
        parts.append(_format_source(index, source))

    if len(sources) > TOP_SOURCES:
        parts.append(f"_Showing top {TOP_SOURCES} of {len(sources)} sources found._")

    return "\n".join(parts).rstrip() + "\n"
