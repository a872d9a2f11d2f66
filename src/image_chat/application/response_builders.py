"""Builders for chat completion objects and streaming chunks.

Generated images are encoded as markdown image references inside the
assistant message content, one ``![image_i](url)`` line per image.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from image_chat.core.utils import unique_id, unix_timestamp

USAGE_PLACEHOLDER = {"prompt_tokens": 1, "completion_tokens": 1, "total_tokens": 2}
"""Fixed usage block. Not a token count; the backend reports none."""


def image_markdown(index: int, url: str) -> str:
    """Render one generated image as a markdown line (``index`` is zero-based)."""
    return f"![image_{index}]({url})\n"


def render_image_content(image_urls: Iterable[str]) -> str:
    return "".join(image_markdown(i, url) for i, url in enumerate(image_urls))


def build_completion(
    content: str,
    model: str,
    *,
    completion_id: str | None = None,
    created: int | None = None,
) -> dict[str, Any]:
    """Build a non-streaming ``chat.completion`` object."""
    return {
        "id": completion_id or unique_id(),
        "model": model,
        "object": "chat.completion",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            },
        ],
        "usage": dict(USAGE_PLACEHOLDER),
        "created": created if created is not None else unix_timestamp(),
    }


def build_completion_chunk(
    index: int,
    content: str,
    model: str,
    finish_reason: str | None,
    *,
    chunk_id: str | None = None,
) -> dict[str, Any]:
    """Build one ``chat.completion.chunk`` event.

    Every chunk gets a fresh id; ``index`` is the only value that orders
    chunks within a stream.
    """
    return {
        "id": chunk_id or unique_id(),
        "model": model,
        "object": "chat.completion.chunk",
        "choices": [
            {
                "index": index,
                "delta": {"role": "assistant", "content": content},
                "finish_reason": finish_reason,
            },
        ],
    }


__all__ = [
    "USAGE_PLACEHOLDER",
    "build_completion",
    "build_completion_chunk",
    "image_markdown",
    "render_image_content",
]
