"""Push channel carrying server-sent-event records to a single consumer.

A producer task writes ``data: <json>\\n\\n`` records while the consumer
iterates the channel (typically a StreamingResponse body). The channel is
closed exactly once by :meth:`EventStreamChannel.end`, which writes the
terminal ``data: [DONE]`` record.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Coroutine
from typing import Any

logger = logging.getLogger(__name__)

DONE_RECORD = "data: [DONE]\n\n"
"""Terminal sentinel record."""


def format_sse_event(payload: dict[str, Any]) -> str:
    """Frame a JSON payload as a single server-sent-event record."""
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


class EventStreamChannel:
    """Single-producer, single-consumer channel of SSE records.

    Records are buffered in an unbounded asyncio.Queue so writes never block
    the producer. Iteration ends after the terminal record has been yielded.
    """

    __slots__ = ("_queue", "_closed", "_producer")

    def __init__(self) -> None:
        self._queue: asyncio.Queue[str | None] = asyncio.Queue()
        self._closed = False
        self._producer: asyncio.Task[None] | None = None

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, record: str) -> None:
        if self._closed:
            raise RuntimeError("Cannot write to a closed channel")
        self._queue.put_nowait(record)

    def write_event(self, payload: dict[str, Any]) -> None:
        self.write(format_sse_event(payload))

    def end(self) -> None:
        """Write the terminal record and close. Later calls are no-ops."""
        if self._closed:
            return
        self._queue.put_nowait(DONE_RECORD)
        self._queue.put_nowait(None)
        self._closed = True

    def start_producer(self, producer: Coroutine[Any, Any, None]) -> asyncio.Task[None]:
        """Spawn the task that fills this channel.

        The channel is ended when the task finishes, whatever the outcome, so
        the consumer always observes the terminal record.
        """
        task = asyncio.create_task(producer)
        task.add_done_callback(self._on_producer_done)
        self._producer = task
        return task

    def _on_producer_done(self, task: asyncio.Task[None]) -> None:
        if not task.cancelled() and task.exception() is not None:
            logger.error("stream_producer_failed: error=%s", task.exception())
        self.end()

    async def __aiter__(self) -> AsyncIterator[str]:
        while True:
            record = await self._queue.get()
            if record is None:
                return
            yield record


__all__ = ["DONE_RECORD", "EventStreamChannel", "format_sse_event"]
