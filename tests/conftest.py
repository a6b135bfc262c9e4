"""
Pytest configuration and shared fixtures for FindOrigin tests.
"""

import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from findorigin.domain.errors import TransportError
from findorigin.domain.models import SearchResult
from findorigin.infrastructure.cache import TTLCache
from findorigin.infrastructure.llm.client import LLMClient
from findorigin.infrastructure.search.invoker import SearchToolInvoker
from findorigin.infrastructure.search.providers import SearchProvider
from findorigin.infrastructure.search.ranking import categorize_source


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeProvider(SearchProvider):
    """Search provider returning canned results and recording queries."""

    def __init__(
        self,
        results: Optional[List[SearchResult]] = None,
        fail: bool = False,
        configured: bool = True,
        name: str = "fake",
    ):
        self.results = results or []
        self.fail = fail
        self._configured = configured
        self.name = name
        self.queries: List[str] = []

    @property
    def configured(self) -> bool:
        return self._configured

    async def search(self, query: str) -> List[SearchResult]:
        self.queries.append(query)
        if self.fail:
            raise TransportError(f"{self.name} is down")
        return list(self.results)


def make_result(url: str, title: str = "Title", snippet: str = "snippet") -> SearchResult:
    return SearchResult(title=title, url=url, snippet=snippet, source_type=categorize_source(url))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return TTLCache(clock=clock)


@pytest.fixture
def five_results():
    """Five distinct blog results in discovery order."""
    return [make_result(f"https://blog{i}.example.com/post", title=f"Post {i}") for i in range(5)]


@pytest.fixture
def fake_provider(five_results):
    return FakeProvider(results=five_results)


@pytest.fixture
def search_invoker(fake_provider, cache):
    return SearchToolInvoker(providers=[fake_provider], cache=cache)


@pytest.fixture
def completion_payload() -> Callable[..., Dict[str, Any]]:
    """Build an OpenAI chat.completion response body."""

    def build(content: Optional[str] = None, tool_calls: Optional[List[Dict[str, Any]]] = None):
        message: Dict[str, Any] = {"role": "assistant", "content": content}
        if tool_calls:
            message["tool_calls"] = tool_calls
        return {
            "id": "chatcmpl-test",
            "object": "chat.completion",
            "created": 1700000000,
            "model": "test-model",
            "choices": [
                {
                    "index": 0,
                    "message": message,
                    "finish_reason": "tool_calls" if tool_calls else "stop",
                }
            ],
        }

    return build


@pytest.fixture
def tool_call() -> Callable[..., Dict[str, Any]]:
    """Build a function tool call entry."""

    def build(call_id: str, arguments: Any, name: str = "web_search"):
        if not isinstance(arguments, str):
            arguments = json.dumps(arguments)
        return {
            "id": call_id,
            "type": "function",
            "function": {"name": name, "arguments": arguments},
        }

    return build


class LLMTransport:
    """httpx mock transport replaying queued chat completion responses."""

    def __init__(self):
        self.responses: List[httpx.Response] = []
        self.requests: List[httpx.Request] = []

    def queue(self, payload: Dict[str, Any], status_code: int = 200) -> None:
        self.responses.append(httpx.Response(status_code, json=payload))

    def queue_raw(self, response: httpx.Response) -> None:
        self.responses.append(response)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        missing = self._unanswered_tool_calls(json.loads(request.content))
        if missing:
            return httpx.Response(
                400,
                json={"error": {"message": f"tool_call_ids {sorted(missing)} did not have response messages"}},
            )
        if not self.responses:
            return httpx.Response(500, json={"error": {"message": "no response queued"}})
        return self.responses.pop(0)

    @staticmethod
    def _unanswered_tool_calls(body: Dict[str, Any]) -> set:
        """Tool call ids without a tool reply, which real endpoints reject."""
        messages = body.get("messages", [])
        requested = {
            tc["id"]
            for m in messages
            if m.get("role") == "assistant"
            for tc in m.get("tool_calls") or []
        }
        answered = {m.get("tool_call_id") for m in messages if m.get("role") == "tool"}
        return requested - answered

    def bodies(self) -> List[Dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests]


@pytest.fixture
def llm_transport():
    return LLMTransport()


@pytest.fixture
def llm_client(llm_transport):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(llm_transport.handler))
    return LLMClient(
        api_key="test-key",
        model="test-model",
        base_url="https://llm.test/api/v1",
        app_url="https://findorigin.test",
        app_title="FindOrigin Bot",
        http_client=http_client,
    )


@pytest.fixture
def result_factory():
    return make_result


@pytest.fixture
def provider_factory():
    return FakeProvider
