"""Core helpers for the image chat gateway."""

from image_chat.core.channel import DONE_RECORD, EventStreamChannel, format_sse_event
from image_chat.core.resilience import RetryPolicy, retry_async
from image_chat.core.utils import unique_id, unix_timestamp

__all__ = [
    "DONE_RECORD",
    "EventStreamChannel",
    "RetryPolicy",
    "format_sse_event",
    "retry_async",
    "unique_id",
    "unix_timestamp",
]
