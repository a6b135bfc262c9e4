"""Source categorization, deduplication and ranking of search results."""

from typing import Dict, Iterable, List

from ...domain.models import SearchResult, SourceType

OFFICIAL_MARKERS = (".gov", ".edu", "official", "правительство")
NEWS_MARKERS = (
    "news",
    "новости",
    "rbc",
    "ria",
    "tass",
    "interfax",
    "bbc",
    "reuters",
    "cnn",
    "theguardian",
)
RESEARCH_MARKERS = ("research", "study", "pubmed", "arxiv", "scholar", "исследование")

SOURCE_PRIORITY: Dict[SourceType, int] = {
    SourceType.OFFICIAL: 4,
    SourceType.NEWS: 3,
    SourceType.RESEARCH: 2,
    SourceType.BLOG: 1,
}


def categorize_source(url: str) -> SourceType:
    """Classify a URL by substring match, official > news > research > blog."""
    lower_url = url.lower()
    if any(marker in lower_url for marker in OFFICIAL_MARKERS):
        return SourceType.OFFICIAL
    if any(marker in lower_url for marker in NEWS_MARKERS):
        return SourceType.NEWS
    if any(marker in lower_url for marker in RESEARCH_MARKERS):
        return SourceType.RESEARCH
    return SourceType.BLOG


def remove_duplicates(results: Iterable[SearchResult]) -> List[SearchResult]:
    """Keep the first result for each exact URL string."""
    seen = set()
    unique: List[SearchResult] = []
    for result in results:
        if result.url in seen:
            continue
        seen.add(result.url)
        unique.append(result)
    return unique


def filter_and_rank(results: Iterable[SearchResult]) -> List[SearchResult]:
    """Drop incomplete results and sort by source priority.

    The sort is stable, so equal priorities keep discovery order.
    """
    complete = [r for r in results if r.url and r.title]
    return sorted(
        complete,
        key=lambda r: SOURCE_PRIORITY.get(r.source_type or SourceType.BLOG, 0),
        reverse=True,
    )
