"""
Behavioral tests for CompletionUseCase.create_completion_stream and the
event stream channel it returns.
"""

import asyncio
from types import SimpleNamespace

import pytest

from image_chat.application.interfaces import FetchResponse
from image_chat.application.use_cases import (
    COMPLETED_MESSAGE,
    FAILURE_PREFIX,
    GENERATING_MESSAGE,
)
from image_chat.core.channel import DONE_RECORD
from image_chat.domain.entities import ChatMessage
from image_chat.domain.exceptions import RequestValidationError
from tests.helpers import CREDENTIAL, DEFAULT_MODEL, decode_sse_record as _decode


async def _collect(channel) -> list[str]:
    return [record async for record in channel]


def _user(text: str) -> list[ChatMessage]:
    return [ChatMessage(role="user", content=text)]


class TestStreamShapes:
    @pytest.mark.asyncio
    async def test_empty_messages_write_only_terminal_record(self, use_case, fake_backend, caplog):
        channel = await use_case.create_completion_stream([], CREDENTIAL)
        records = await _collect(channel)

        assert records == [DONE_RECORD]
        assert channel.closed
        fake_backend.generate_images.assert_not_awaited()
        assert any(r.levelname == "WARNING" for r in caplog.records)

    @pytest.mark.asyncio
    async def test_successful_generation_sequence(self, use_case):
        channel = await use_case.create_completion_stream(_user("a red fox"), CREDENTIAL)
        records = await _collect(channel)

        assert len(records) == 2 + 2 + 1
        assert records[-1] == "data: [DONE]\n\n"
        chunks = [_decode(r) for r in records[:-1]]

        assert [c["choices"][0]["index"] for c in chunks] == [0, 1, 2, 3]
        assert [c["choices"][0]["finish_reason"] for c in chunks] == [None, None, "stop", "stop"]
        assert [c["choices"][0]["delta"]["content"] for c in chunks] == [
            GENERATING_MESSAGE,
            "![image_0](https://cdn.example.com/a.png)\n",
            "![image_1](https://cdn.example.com/b.png)\n",
            COMPLETED_MESSAGE,
        ]
        for chunk in chunks:
            assert chunk["object"] == "chat.completion.chunk"
            assert chunk["model"] == DEFAULT_MODEL
            assert chunk["choices"][0]["delta"]["role"] == "assistant"
        assert len({c["id"] for c in chunks}) == len(chunks)

    @pytest.mark.asyncio
    async def test_zero_images_emits_completion_at_index_one(self, use_case, fake_backend):
        fake_backend.generate_images.return_value = []
        channel = await use_case.create_completion_stream(_user("x"), CREDENTIAL)
        records = await _collect(channel)

        chunks = [_decode(r) for r in records[:-1]]
        assert [c["choices"][0]["index"] for c in chunks] == [0, 1]
        assert chunks[1]["choices"][0]["delta"]["content"] == COMPLETED_MESSAGE
        assert chunks[1]["choices"][0]["finish_reason"] == "stop"
        assert records[-1] == DONE_RECORD

    @pytest.mark.asyncio
    async def test_generation_failure_becomes_error_chunk(self, use_case, fake_backend, request_log):
        fake_backend.generate_images.side_effect = RuntimeError("boom")

        channel = await use_case.create_completion_stream(_user("x"), CREDENTIAL)
        records = await _collect(channel)

        assert len(records) == 3
        announcement, error = (_decode(r) for r in records[:2])
        assert announcement["choices"][0]["index"] == 0
        assert error["choices"][0]["index"] == 1
        assert error["choices"][0]["finish_reason"] == "stop"
        assert error["choices"][0]["delta"]["content"] == f"{FAILURE_PREFIX}boom"
        assert records[-1] == DONE_RECORD

        event = request_log.events[-1]
        assert event["operation"] == "completion_stream"
        assert event["status"] == "error"

    @pytest.mark.asyncio
    async def test_reference_download_failure_is_reported_in_stream(self, use_case, fake_fetcher):
        url = "https://images.example.com/gone.jpeg"
        fake_fetcher.fetch.return_value = FetchResponse(ok=False, status=404, body=b"")

        channel = await use_case.create_completion_stream(_user(f"{url} draw"), CREDENTIAL)
        records = await _collect(channel)

        error = _decode(records[1])
        assert url in error["choices"][0]["delta"]["content"]
        assert records[-1] == DONE_RECORD

    @pytest.mark.asyncio
    async def test_model_identifier_echoed_in_chunks(self, use_case, fake_backend):
        channel = await use_case.create_completion_stream(
            _user("x"), CREDENTIAL, model="seedream:800x600"
        )
        records = await _collect(channel)

        assert {_decode(r)["model"] for r in records[:-1]} == {"seedream:800x600"}
        size = fake_backend.generate_images.await_args.args[2]
        assert size.as_label() == "800x600"


class TestStreamTiming:
    @pytest.mark.asyncio
    async def test_announcement_precedes_generation(self, use_case, fake_backend):
        release = asyncio.Event()

        async def slow_generation(*args):
            await release.wait()
            return ["https://cdn.example.com/late.png"]

        fake_backend.generate_images.side_effect = slow_generation

        channel = await use_case.create_completion_stream(_user("x"), CREDENTIAL)
        iterator = channel.__aiter__()
        first = _decode(await anext(iterator))

        assert first["choices"][0]["delta"]["content"] == GENERATING_MESSAGE
        assert not channel.closed

        release.set()
        rest = [record async for record in iterator]
        assert rest[-1] == DONE_RECORD
        assert "late.png" in _decode(rest[0])["choices"][0]["delta"]["content"]

    @pytest.mark.asyncio
    async def test_non_text_content_fails_before_channel_exists(self, use_case, fake_backend):
        messages = [SimpleNamespace(role="user", content=None)]

        with pytest.raises(RequestValidationError):
            await use_case.create_completion_stream(messages, CREDENTIAL)

        fake_backend.generate_images.assert_not_awaited()
