"""Search tool invoker used by the AI model's web_search tool."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from ...domain.errors import TransportError
from ...domain.models import SearchResult
from ..cache import SEARCH_TTL_SECONDS, TTLCache, search_cache_key
from .providers import SearchProvider
from .ranking import filter_and_rank, remove_duplicates

logger = logging.getLogger(__name__)

DEFAULT_RESULT_CAP = 3


class SearchToolInvoker:
    """Runs web searches across providers with caching and ranking.

    Providers are tried in order; the first one that answers wins. Search
    never raises: a query that no provider can answer contributes nothing.
    """

    def __init__(
        self,
        providers: Sequence[SearchProvider],
        cache: TTLCache,
        result_cap: int = DEFAULT_RESULT_CAP,
        cache_ttl: float = SEARCH_TTL_SECONDS,
    ) -> None:
        """Initialize the invoker.

        Args:
            providers: Search backends, primary first.
            cache: Shared TTL cache.
            result_cap: Upper bound on returned results. Defaults to 3.
            cache_ttl: TTL for cached per-query results in seconds.
        """
        self.providers = list(providers)
        self.cache = cache
        self.result_cap = result_cap
        self.cache_ttl = cache_ttl

    async def _perform_search(self, query: str) -> List[SearchResult]:
        last_error: Optional[TransportError] = None
        for provider in self.providers:
            if not provider.configured:
                logger.debug("Search provider %s not configured, skipping", provider.name)
                continue
            try:
                return await provider.search(query)
            except TransportError as e:
                logger.warning("Search provider %s failed: %s", provider.name, e)
                last_error = e
        raise last_error or TransportError("No search provider is configured")

    async def search(
        self, queries: Sequence[str], max_results: Optional[int] = None
    ) -> List[SearchResult]:
        """Search all queries and return deduplicated, ranked results.

        Args:
            queries: Search queries, processed in order.
            max_results: Optional caller limit, never above the result cap.

        Returns:
            At most ``min(result_cap, max_results)`` results.
        """
        all_results: List[SearchResult] = []

        for query in queries:
            cache_key = search_cache_key(query)
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.debug("Cache hit for query: %s", query)
                all_results.extend(cached)
                continue

            logger.info("Searching for: %s", query)
            try:
                results = await self._perform_search(query)
            except TransportError:
                logger.error("Error searching for %r", query, exc_info=True)
                continue

            self.cache.set(cache_key, results, ttl=self.cache_ttl)
            all_results.extend(results)

        ranked = filter_and_rank(remove_duplicates(all_results))

        limit = self.result_cap
        if max_results is not None:
            limit = max(0, min(limit, max_results))
        return ranked[:limit]

    async def search_query(
        self, query: str, max_results: Optional[int] = None
    ) -> List[SearchResult]:
        """Search a single query."""
        return await self.search([query], max_results=max_results)
