"""
Tests for message processing and the Telegram update loop.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import httpx

from findorigin.application.formatter import NO_SOURCES_MESSAGE
from findorigin.application.processor import (
    MSG_EXTRACT_EMPTY,
    MSG_EXTRACT_FAILED,
    MSG_EXTRACTING,
    MSG_FAILED,
    MSG_SEARCHING,
    MSG_STARTED,
    MessageProcessor,
)
from findorigin.domain.errors import TelegramAPIError, TransportError
from findorigin.domain.models import AnalysisResult, SourceAnalysis
from findorigin.interfaces.bot import handle_update, run_polling

RESULT = AnalysisResult(
    sources=(SourceAnalysis(url="https://reuters.com/a", title="Reuters", relevance_score=90),),
    summary="Reported by Reuters.",
)


def _processor(result=RESULT, post_text=None, extract_error=None):
    analyzer = MagicMock()
    analyzer.analyze = AsyncMock(return_value=result)
    telegram = MagicMock()
    telegram.send_message = AsyncMock()
    extractor = MagicMock()
    extractor.extract = AsyncMock(return_value=post_text, side_effect=extract_error)
    return MessageProcessor(analyzer, telegram, extractor)


def _sent(processor):
    return [c.args[1] for c in processor.telegram.send_message.await_args_list]


class TestMessageProcessor:
    """Tests for MessageProcessor.process."""

    def test_plain_text_flow(self):
        processor = _processor()

        asyncio.run(processor.process(42, "Coinbase CEO fired engineers"))

        sent = _sent(processor)
        assert sent[:2] == [MSG_STARTED, MSG_SEARCHING]
        assert "Reuters" in sent[2]
        assert len(sent) == 3
        processor.analyzer.analyze.assert_awaited_once_with("Coinbase CEO fired engineers")
        processor.post_extractor.extract.assert_not_awaited()

    def test_telegram_link_is_replaced_by_post_text(self):
        processor = _processor(post_text="Text of the post")

        asyncio.run(processor.process(1, "https://t.me/chan/5"))

        assert _sent(processor)[:3] == [MSG_STARTED, MSG_EXTRACTING, MSG_SEARCHING]
        processor.analyzer.analyze.assert_awaited_once_with("Text of the post")

    def test_empty_post_falls_back_to_message(self):
        processor = _processor(post_text=None)

        asyncio.run(processor.process(1, "https://t.me/chan/5"))

        assert MSG_EXTRACT_EMPTY in _sent(processor)
        processor.analyzer.analyze.assert_awaited_once_with("https://t.me/chan/5")

    def test_extraction_error_falls_back_to_message(self):
        processor = _processor(extract_error=TransportError("offline"))

        asyncio.run(processor.process(1, "t.me/chan/5"))

        assert MSG_EXTRACT_FAILED in _sent(processor)
        processor.analyzer.analyze.assert_awaited_once_with("t.me/chan/5")

    def test_unavailable_analysis_renders_no_sources(self):
        processor = _processor(result=AnalysisResult.unavailable())

        asyncio.run(processor.process(1, "claim"))

        assert _sent(processor)[-1] == NO_SOURCES_MESSAGE

    def test_internal_error_sends_apology(self):
        processor = _processor()
        processor.analyzer.analyze.side_effect = RuntimeError("boom")

        asyncio.run(processor.process(1, "claim"))

        assert _sent(processor)[-1] == MSG_FAILED

    def test_apology_failure_is_logged_not_raised(self):
        processor = _processor()
        processor.telegram.send_message.side_effect = TelegramAPIError("Forbidden", 403)

        asyncio.run(processor.process(1, "claim"))

        assert processor.telegram.send_message.await_count == 2


class TestHandleUpdate:
    """Tests for update dispatch."""

    def test_message_is_processed(self):
        processor = MagicMock()
        processor.process = AsyncMock()
        update = {"update_id": 1, "message": {"chat": {"id": 9}, "text": "claim"}}

        assert asyncio.run(handle_update(update, processor)) == {"ok": True}
        processor.process.assert_awaited_once_with(9, "claim")

    def test_edited_message_is_processed(self):
        processor = MagicMock()
        processor.process = AsyncMock()
        update = {"edited_message": {"chat": {"id": 9}, "text": "edited"}}

        asyncio.run(handle_update(update, processor))

        processor.process.assert_awaited_once_with(9, "edited")

    def test_updates_without_text_are_ignored(self):
        processor = MagicMock()
        processor.process = AsyncMock()

        for update in (
            {},
            {"callback_query": {}},
            {"message": {"chat": {"id": 9}}},
            {"message": {"text": "no chat"}},
            {"message": "garbage"},
        ):
            assert asyncio.run(handle_update(update, processor)) == {"ok": True}

        processor.process.assert_not_awaited()

    def test_processing_errors_are_acknowledged(self):
        processor = MagicMock()
        processor.process = AsyncMock(side_effect=RuntimeError("boom"))
        update = {"message": {"chat": {"id": 9}, "text": "claim"}}

        assert asyncio.run(handle_update(update, processor)) == {"ok": True}


class TestRunPolling:
    """Tests for the long-polling loop."""

    def test_offsets_advance_and_errors_back_off(self):
        telegram = MagicMock()
        telegram.delete_webhook = AsyncMock()
        telegram.get_updates = AsyncMock(
            side_effect=[
                httpx.ConnectError("offline"),
                [
                    {"update_id": 10, "message": {"chat": {"id": 1}, "text": "a"}},
                    {"update_id": 11, "message": {"chat": {"id": 2}, "text": "b"}},
                ],
                [{"update_id": 12, "message": {"chat": {"id": 3}, "text": "c"}}],
            ]
        )
        processor = MagicMock()
        processor.process = AsyncMock()

        asyncio.run(run_polling(telegram, processor, error_backoff=0, max_updates=3))

        telegram.delete_webhook.assert_awaited_once()
        offsets = [c.kwargs["offset"] for c in telegram.get_updates.await_args_list]
        assert offsets == [None, None, 12]
        assert [c.args for c in processor.process.await_args_list] == [
            (1, "a"),
            (2, "b"),
            (3, "c"),
        ]
