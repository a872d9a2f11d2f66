"""Use cases for the image chat gateway.

This module defines the completion use case, which turns a chat-style
message list into image generation calls and encodes the results as an
assistant message.

Design Principles:
    - Dependency Inversion: Depend on interfaces (Protocols), not implementations
    - Framework-agnostic: No FastAPI or Pydantic dependencies
    - Whole-pipeline retries: each attempt re-runs parsing, fetching and generation

Use Case Responsibilities:
    - Validate the message list and extract the last message text
    - Resolve the compound model identifier
    - Coordinate reference extraction and generation dispatch
    - Build completion objects or drive the streaming channel
    - Log one structured event per completion
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from image_chat.application.generation import GenerationDispatcher, ReferenceExtractor
from image_chat.application.response_builders import (
    build_completion,
    build_completion_chunk,
    image_markdown,
    render_image_content,
)
from image_chat.core.channel import EventStreamChannel
from image_chat.core.resilience import RetryPolicy, retry_async
from image_chat.domain.exceptions import RequestValidationError
from image_chat.domain.value_objects import parse_model_identifier

if TYPE_CHECKING:
    from image_chat.application.interfaces import (
        ImageBackendInterface,
        ImageFetcherInterface,
        RequestLoggerInterface,
    )
    from image_chat.domain.entities import ChatMessage
    from image_chat.domain.value_objects import ModelSpec

logger = logging.getLogger(__name__)

GENERATING_MESSAGE = "🎨 Generating image, please wait..."
COMPLETED_MESSAGE = "Image generation complete!"
FAILURE_PREFIX = "Image generation failed: "


def _last_message_text(messages: Sequence[ChatMessage]) -> str:
    if not messages:
        raise RequestValidationError("Messages cannot be empty")
    content = messages[-1].content
    if not isinstance(content, str):
        raise RequestValidationError("Last message content must be text")
    return content


def _response_model(identifier: str, spec: ModelSpec) -> str:
    return identifier or spec.model


class CompletionUseCase:
    """Use case for image-generating chat completions.

    Attributes:
        _extractor: Detects and downloads the optional reference image.
        _dispatcher: Selects and runs the generation strategy.
        _logger: Structured request logger. Optional.
        _retry_policy: Bound and delay for whole-pipeline retries.
        _default_model: Identifier used when the caller supplies none.
    """

    def __init__(
        self,
        fetcher: ImageFetcherInterface,
        backend: ImageBackendInterface,
        logger: RequestLoggerInterface | None = None,
        *,
        retry_policy: RetryPolicy | None = None,
        default_model: str,
    ) -> None:
        self._extractor = ReferenceExtractor(fetcher)
        self._dispatcher = GenerationDispatcher(backend)
        self._logger = logger
        self._retry_policy = retry_policy or RetryPolicy()
        self._default_model = default_model

    @property
    def default_model(self) -> str:
        return self._default_model

    async def create_completion(
        self,
        messages: Sequence[ChatMessage],
        credential: str,
        model: str | None = None,
        retry_count: int = 0,
        request_id: str | None = None,
    ) -> dict[str, Any]:
        """Run the pipeline and return a ``chat.completion`` object.

        The assistant content is one ``![image_i](url)`` line per generated
        image, in backend order.

        Args:
            messages: Conversation; only the last message is used.
            credential: Backend API key.
            model: Compound model identifier, e.g. ``"name:1920x1080"``.
                Defaults to the configured model.
            retry_count: Retries already consumed by the caller.
            request_id: Optional id included in log events.

        Raises:
            RequestValidationError: If ``messages`` is empty.
            RemoteResourceError: If the reference image cannot be fetched.
            GenerationError: If upload or generation fails.
        """
        identifier = model or self._default_model
        return await retry_async(
            lambda: self._complete(messages, credential, identifier, request_id),
            policy=self._retry_policy,
            retry_count=retry_count,
            operation_name="completion",
        )

    async def _complete(
        self,
        messages: Sequence[ChatMessage],
        credential: str,
        identifier: str,
        request_id: str | None,
    ) -> dict[str, Any]:
        start_time = time.perf_counter()
        spec = parse_model_identifier(identifier)
        response_model = _response_model(identifier, spec)
        logger.info("completion_messages: model=%s, messages=%s", identifier, messages)

        try:
            prompt_text = _last_message_text(messages)
            reference = await self._extractor.extract(prompt_text)
            image_urls = await self._dispatcher.dispatch(spec, reference, credential)
        except Exception as exc:
            self._log_event("completion", "error", response_model, start_time, request_id, exc=exc)
            raise

        self._log_event(
            "completion",
            "success",
            response_model,
            start_time,
            request_id,
            image_count=len(image_urls),
        )
        return build_completion(render_image_content(image_urls), response_model)

    async def create_completion_stream(
        self,
        messages: Sequence[ChatMessage],
        credential: str,
        model: str | None = None,
        retry_count: int = 0,
        request_id: str | None = None,
    ) -> EventStreamChannel:
        """Start the pipeline and return a channel of SSE records.

        The channel is returned as soon as the announcement chunk has been
        written; extraction and generation continue in a background task.
        Failures after that point are reported as an in-stream error chunk,
        never raised. Every stream ends with ``data: [DONE]``.

        An empty message list yields a channel carrying only the terminal
        record.

        Raises:
            RequestValidationError: If the last message carries no text.
        """
        identifier = model or self._default_model
        return await retry_async(
            lambda: self._open_stream(messages, credential, identifier, request_id),
            policy=self._retry_policy,
            retry_count=retry_count,
            operation_name="completion_stream",
        )

    async def _open_stream(
        self,
        messages: Sequence[ChatMessage],
        credential: str,
        identifier: str,
        request_id: str | None,
    ) -> EventStreamChannel:
        spec = parse_model_identifier(identifier)
        response_model = _response_model(identifier, spec)
        logger.info("completion_stream_messages: model=%s, messages=%s", identifier, messages)

        channel = EventStreamChannel()
        if not messages:
            logger.warning("completion_stream_empty_messages: returning terminal record only")
            channel.end()
            return channel

        prompt_text = _last_message_text(messages)
        channel.write_event(build_completion_chunk(0, GENERATING_MESSAGE, response_model, None))
        channel.start_producer(
            self._produce(channel, spec, response_model, prompt_text, credential, request_id)
        )
        return channel

    async def _produce(
        self,
        channel: EventStreamChannel,
        spec: ModelSpec,
        response_model: str,
        prompt_text: str,
        credential: str,
        request_id: str | None,
    ) -> None:
        start_time = time.perf_counter()
        try:
            reference = await self._extractor.extract(prompt_text)
            image_urls = await self._dispatcher.dispatch(spec, reference, credential)
        except Exception as exc:
            logger.error("completion_stream_failed: error=%s", exc, exc_info=exc)
            channel.write_event(
                build_completion_chunk(1, f"{FAILURE_PREFIX}{exc}", response_model, "stop")
            )
            self._log_event("completion_stream", "error", response_model, start_time, request_id, exc=exc)
        else:
            last = len(image_urls) - 1
            for i, url in enumerate(image_urls):
                channel.write_event(
                    build_completion_chunk(
                        i + 1,
                        image_markdown(i, url),
                        response_model,
                        "stop" if i == last else None,
                    )
                )
            channel.write_event(
                build_completion_chunk(len(image_urls) + 1, COMPLETED_MESSAGE, response_model, "stop")
            )
            self._log_event(
                "completion_stream",
                "success",
                response_model,
                start_time,
                request_id,
                image_count=len(image_urls),
            )
        finally:
            channel.end()

    def _log_event(
        self,
        operation: str,
        status: str,
        model: str,
        start_time: float,
        request_id: str | None,
        *,
        image_count: int | None = None,
        exc: BaseException | None = None,
    ) -> None:
        if self._logger is None:
            return
        event: dict[str, Any] = {
            "event": "api_request",
            "operation": operation,
            "status": status,
            "model": model,
            "request_id": request_id,
            "latency_ms": round((time.perf_counter() - start_time) * 1000, 3),
        }
        if image_count is not None:
            event["image_count"] = image_count
        if exc is not None:
            event["error_type"] = type(exc).__name__
            event["error_message"] = str(exc)
        self._logger.log_request(event)


__all__ = [
    "COMPLETED_MESSAGE",
    "FAILURE_PREFIX",
    "GENERATING_MESSAGE",
    "CompletionUseCase",
]
