"""
Tests for the Telegram Bot API client and post extraction.
"""

import asyncio
import json

import httpx
import pytest

from findorigin.domain.errors import TelegramAPIError, TransportError
from findorigin.infrastructure.telegram import (
    TelegramBotClient,
    TelegramPostExtractor,
    is_telegram_link,
    parse_telegram_link,
)


class BotAPI:
    """Records Bot API calls and answers them with a handler."""

    def __init__(self, reject_markdown: bool = False):
        self.calls = []
        self.reject_markdown = reject_markdown

    def handler(self, request: httpx.Request) -> httpx.Response:
        method = request.url.path.rsplit("/", 1)[-1]
        body = json.loads(request.content or b"{}")
        self.calls.append((method, body))
        if method == "sendMessage" and self.reject_markdown and body.get("parse_mode"):
            return httpx.Response(
                400,
                json={"ok": False, "description": "Bad Request: can't parse entities"},
            )
        if method == "getUpdates":
            return httpx.Response(200, json={"ok": True, "result": [{"update_id": 7}]})
        return httpx.Response(200, json={"ok": True, "result": True})


def _telegram(api: BotAPI, token="123:abc", max_len=4000) -> TelegramBotClient:
    client = httpx.AsyncClient(transport=httpx.MockTransport(api.handler))
    return TelegramBotClient(token, client, max_message_length=max_len, chunk_delay=0)


class TestSendMessage:
    """Tests for sendMessage handling."""

    def test_sends_markdown(self):
        api = BotAPI()
        asyncio.run(_telegram(api).send_message(42, "*hi*"))

        assert api.calls == [
            ("sendMessage", {"chat_id": 42, "text": "*hi*", "parse_mode": "Markdown"})
        ]

    def test_token_is_in_url(self):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200, json={"ok": True, "result": True})

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        asyncio.run(TelegramBotClient("123:abc", client).send_message(1, "x"))

        assert seen == ["https://api.telegram.org/bot123:abc/sendMessage"]

    def test_falls_back_to_plain_text(self):
        api = BotAPI(reject_markdown=True)
        asyncio.run(_telegram(api).send_message(42, "*broken_markdown"))

        assert [body.get("parse_mode") for _, body in api.calls] == ["Markdown", None]
        assert api.calls[1][1] == {"chat_id": 42, "text": "*broken_markdown"}

    def test_long_message_is_split(self):
        api = BotAPI()
        text = "\n".join(f"line {i:03d}" for i in range(40))

        asyncio.run(_telegram(api, max_len=100).send_message(1, text))

        texts = [body["text"] for _, body in api.calls]
        assert len(texts) > 1
        assert all(len(t) <= 100 for t in texts)
        assert "\n".join(texts) == text

    def test_missing_token_skips_sending(self):
        api = BotAPI()
        asyncio.run(_telegram(api, token=None).send_message(1, "x"))
        assert api.calls == []

    def test_non_parse_rejection_is_not_resent(self):
        calls = []

        def handler(request):
            calls.append(json.loads(request.content))
            return httpx.Response(403, json={"ok": False, "description": "Forbidden: bot was blocked"})

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        telegram = TelegramBotClient("t", client, chunk_delay=0)

        with pytest.raises(TelegramAPIError) as exc_info:
            asyncio.run(telegram.send_message(1, "x"))

        assert exc_info.value.status_code == 403
        assert not exc_info.value.is_parse_error
        assert len(calls) == 1
        assert calls[0]["parse_mode"] == "Markdown"

    def test_plain_text_rejection_after_parse_error_propagates(self):
        def handler(request):
            body = json.loads(request.content)
            if body.get("parse_mode"):
                return httpx.Response(
                    400, json={"ok": False, "description": "Bad Request: can't parse entities"}
                )
            return httpx.Response(400, json={"ok": False, "description": "Bad Request: message is too long"})

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        telegram = TelegramBotClient("t", client, chunk_delay=0)

        with pytest.raises(TelegramAPIError) as exc_info:
            asyncio.run(telegram.send_message(1, "x"))

        assert exc_info.value.description == "Bad Request: message is too long"


class TestPolling:
    """Tests for getUpdates and deleteWebhook."""

    def test_get_updates(self):
        api = BotAPI()
        updates = asyncio.run(_telegram(api).get_updates(offset=5, timeout=1))

        assert updates == [{"update_id": 7}]
        method, body = api.calls[0]
        assert method == "getUpdates"
        assert body["offset"] == 5
        assert body["allowed_updates"] == ["message", "edited_message"]

    def test_delete_webhook(self):
        api = BotAPI()
        asyncio.run(_telegram(api).delete_webhook())
        assert api.calls[0][0] == "deleteWebhook"


POST_HTML = """
<html><head><meta property="og:description" content="Meta fallback text"></head>
<body><div class="tgme_widget_message_text">Coinbase CEO <b>fired</b> engineers</div></body></html>
"""

META_ONLY_HTML = """
<html><head><meta property="og:description" content="  Only meta  "></head><body></body></html>
"""


def _extractor(handler) -> TelegramPostExtractor:
    return TelegramPostExtractor(httpx.AsyncClient(transport=httpx.MockTransport(handler)))


class TestPostExtractor:
    """Tests for scraping t.me post pages."""

    def test_link_detection(self):
        assert is_telegram_link("see https://t.me/durov/123 please")
        assert is_telegram_link("telegram.me/some_channel/9")
        assert not is_telegram_link("https://t.me/durov")
        assert not is_telegram_link("plain claim text")
        assert parse_telegram_link("t.me/chan/42") == ("chan", "42")

    def test_extracts_message_text(self):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200, text=POST_HTML)

        text = asyncio.run(_extractor(handler).extract("https://t.me/chan/42"))

        assert text == "Coinbase CEO fired engineers"
        assert seen == ["https://t.me/chan/42"]

    def test_falls_back_to_meta_description(self):
        extractor = _extractor(lambda r: httpx.Response(200, text=META_ONLY_HTML))
        assert asyncio.run(extractor.extract("t.me/chan/1")) == "Only meta"

    def test_page_without_text_returns_none(self):
        extractor = _extractor(lambda r: httpx.Response(200, text="<html></html>"))
        assert asyncio.run(extractor.extract("t.me/chan/1")) is None

    def test_error_status_returns_none(self):
        extractor = _extractor(lambda r: httpx.Response(404))
        assert asyncio.run(extractor.extract("t.me/chan/1")) is None

    def test_no_link_returns_none(self):
        extractor = _extractor(lambda r: httpx.Response(200, text=POST_HTML))
        assert asyncio.run(extractor.extract("no link here")) is None

    def test_network_error_raises_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("offline", request=request)

        with pytest.raises(TransportError):
            asyncio.run(_extractor(handler).extract("t.me/chan/1"))
