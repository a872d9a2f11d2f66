"""Mappers between API models and domain entities."""

from __future__ import annotations

from collections.abc import Sequence

from image_chat.api.models import ChatMessageIn
from image_chat.domain.entities import ChatMessage
from image_chat.domain.exceptions import RequestValidationError


def content_to_text(content: str | Sequence[object] | None) -> str:
    """Flatten message content to plain text.

    Text parts of a content-part list are joined with newlines; other parts
    (image_url, input_audio, ...) are ignored.
    """
    match content:
        case None:
            return ""
        case str():
            return content
        case _:
            texts = [
                part.text
                for part in content
                if getattr(part, "type", None) == "text" and getattr(part, "text", None)
            ]
            return "\n".join(texts)


def api_to_domain_messages(messages: Sequence[ChatMessageIn]) -> list[ChatMessage]:
    """Convert API messages to domain ChatMessage entities.

    Raises:
        RequestValidationError: If a message is rejected by the domain entity.
    """
    try:
        return [
            ChatMessage(role=message.role, content=content_to_text(message.content))
            for message in messages
        ]
    except ValueError as exc:
        raise RequestValidationError(str(exc)) from exc


__all__ = ["api_to_domain_messages", "content_to_text"]
