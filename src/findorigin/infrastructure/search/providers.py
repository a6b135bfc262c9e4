"""Web search provider clients (Google Custom Search, DuckDuckGo)."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from httpx import AsyncClient, HTTPError

from ...domain.errors import TransportError
from ...domain.models import SearchResult
from .ranking import categorize_source

logger = logging.getLogger(__name__)


class SearchProvider:
    """Interface for a single web search backend."""

    name = "provider"

    @property
    def configured(self) -> bool:
        """Whether the provider has the credentials it needs."""
        return True

    async def search(self, query: str) -> List[SearchResult]:
        """Run one query.

        Raises:
            TransportError: If the backend cannot be reached or answers non-2xx.
        """
        raise NotImplementedError

    async def _get_json(
        self, client: AsyncClient, url: str, params: Dict[str, Any]
    ) -> Dict[str, Any]:
        try:
            resp = await client.get(url, params=params)
            resp.raise_for_status()
            data = resp.json()
        except HTTPError as e:
            raise TransportError(f"{self.name} search failed: {e}") from e
        except ValueError as e:
            raise TransportError(f"{self.name} returned invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise TransportError(f"{self.name} returned unexpected payload")
        return data


class GoogleSearchProvider(SearchProvider):
    """Google Custom Search JSON API client.

    Usage:
        ```python
        provider = GoogleSearchProvider(api_key, cse_id, http_client)
        results = await provider.search("query")
        ```
    """

    name = "google"
    BASE_URL = "https://www.googleapis.com/customsearch/v1"

    def __init__(
        self,
        api_key: Optional[str],
        cse_id: Optional[str],
        http_client: AsyncClient,
        num: int = 5,
    ) -> None:
        """Initialize Google search client.

        Args:
            api_key: Custom Search API key. Provider is skipped without it.
            cse_id: Programmable search engine id. Provider is skipped without it.
            http_client: HTTP client for making requests.
            num: Number of results to request. Defaults to 5.
        """
        self.api_key = api_key
        self.cse_id = cse_id
        self._client = http_client
        self.num = num

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.cse_id)

    async def search(self, query: str) -> List[SearchResult]:
        params = {"key": self.api_key, "cx": self.cse_id, "q": query, "num": self.num}
        data = await self._get_json(self._client, self.BASE_URL, params)

        results: List[SearchResult] = []
        for item in data.get("items") or []:
            if not isinstance(item, dict):
                continue
            link = item.get("link") or ""
            results.append(
                SearchResult(
                    title=item.get("title") or "",
                    url=link,
                    snippet=item.get("snippet") or "",
                    source_type=categorize_source(link),
                )
            )
        return results


class DuckDuckGoProvider(SearchProvider):
    """DuckDuckGo Instant Answer API client.

    The instant answer API only returns an abstract and related topics,
    so result lists are short. It needs no credentials.
    """

    name = "duckduckgo"
    BASE_URL = "https://api.duckduckgo.com/"
    MAX_RELATED_TOPICS = 2

    def __init__(self, http_client: AsyncClient) -> None:
        self._client = http_client

    async def search(self, query: str) -> List[SearchResult]:
        params = {"q": query, "format": "json", "no_html": 1, "skip_disambig": 1}
        data = await self._get_json(self._client, self.BASE_URL, params)

        results: List[SearchResult] = []
        abstract = data.get("AbstractText")
        if abstract:
            abstract_url = data.get("AbstractURL") or ""
            results.append(
                SearchResult(
                    title=data.get("Heading") or query,
                    url=abstract_url,
                    snippet=abstract,
                    source_type=categorize_source(abstract_url),
                )
            )

        for topic in (data.get("RelatedTopics") or [])[: self.MAX_RELATED_TOPICS]:
            if not isinstance(topic, dict) or not topic.get("FirstURL") or not topic.get("Text"):
                continue
            results.append(
                SearchResult(
                    title=topic["Text"][:100],
                    url=topic["FirstURL"],
                    snippet=topic["Text"],
                    source_type=categorize_source(topic["FirstURL"]),
                )
            )
        return results
