"""Request and response models for the REST API.

Pydantic v2 models for the OpenAI-compatible chat completion surface. Request
models tolerate unknown OpenAI fields (temperature, n, ...) and ignore them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ContentPart(BaseModel):
    """One element of an OpenAI content-part list. Only text parts are used."""

    model_config = ConfigDict(extra="allow")

    type: str
    text: str | None = None


class ChatMessageIn(BaseModel):
    """A chat message as sent by OpenAI-compatible clients."""

    model_config = ConfigDict(extra="allow")

    role: Literal["user", "assistant", "system", "tool"]
    content: str | list[ContentPart] | None = None


class ChatCompletionRequest(BaseModel):
    """Body of ``POST /v1/chat/completions``.

    Attributes:
        model: Compound model identifier (``"name"`` or ``"name:WxH"``).
            None selects the configured default model.
        messages: Conversation. Only the last message's text is used. May be
            empty: streaming then yields only the terminal record, and the
            non-streaming call fails with 400.
        stream: Whether to respond with server-sent events.
    """

    model_config = ConfigDict(extra="allow")

    model: str | None = Field(None, description="Model identifier, optionally with ':WxH' size")
    messages: list[ChatMessageIn] = Field(default_factory=list)
    stream: bool = False


class ErrorDetail(BaseModel):
    code: str
    message: str
    request_id: str | None = None


class ErrorResponse(BaseModel):
    """Error body returned for every non-2xx response."""

    error: ErrorDetail


class ModelCard(BaseModel):
    id: str
    object: Literal["model"] = "model"
    created: int
    owned_by: str = "image-chat-gateway"


class ModelList(BaseModel):
    object: Literal["list"] = "list"
    data: list[ModelCard]


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"


@dataclass(slots=True, frozen=True)
class RequestContext:
    """Context for tracking API requests.

    Attributes:
        request_id: Unique request identifier (UUID hex string).
        client_ip: Client IP address extracted from request.
        user_agent: User-Agent header value. None if not present.
    """

    request_id: str
    client_ip: str
    user_agent: str | None = None
