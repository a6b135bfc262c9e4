"""Web search infrastructure."""

from .invoker import SearchToolInvoker
from .providers import DuckDuckGoProvider, GoogleSearchProvider, SearchProvider
from .ranking import categorize_source, filter_and_rank, remove_duplicates

__all__ = [
    "DuckDuckGoProvider",
    "GoogleSearchProvider",
    "SearchProvider",
    "SearchToolInvoker",
    "categorize_source",
    "filter_and_rank",
    "remove_duplicates",
]
