"""Interfaces (Protocols) for application layer dependencies.

The application layer depends on these Protocols, not on concrete httpx or
logging implementations. Implementations don't need to inherit from these
protocols; they just need to implement the required methods.

Key Interfaces:
    - ImageFetcherInterface: Generic HTTP GET for reference images
    - ImageBackendInterface: Reference upload plus the two generation strategies
    - RequestLoggerInterface: Structured request logging
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from image_chat.domain.value_objects import GenerationSize, ReferenceGenerationOptions


@dataclass(slots=True, frozen=True)
class FetchResponse:
    """Outcome of a GET request.

    Attributes:
        ok: True for 2xx statuses.
        status: HTTP status code.
        body: Raw response body.
        content_type: Content-Type header value, if any.
    """

    ok: bool
    status: int
    body: bytes
    content_type: str | None = None


class ImageFetcherInterface(Protocol):
    """Protocol for downloading reference images."""

    async def fetch(self, url: str) -> FetchResponse:
        """Issue a GET request for ``url``.

        Non-2xx responses are returned, not raised.

        Raises:
            ConnectionError: On network failure (DNS, refused, timeout, ...).
        """
        ...


class ImageBackendInterface(Protocol):
    """Protocol for the image generation backend.

    All methods are potentially long-running and may fail with any
    exception; the dispatcher normalises failures to GenerationError.
    """

    async def upload_reference_image(
        self,
        blob: bytes,
        credential: str,
        content_type: str | None = None,
    ) -> str:
        """Upload a reference image and return a handle usable in generation.

        ``content_type`` is the MIME type reported by the image host, when known.
        """
        ...

    async def generate_images(
        self,
        model: str,
        prompt: str,
        size: GenerationSize,
        credential: str,
    ) -> Sequence[str]:
        """Generate images from a prompt and return their URLs in order."""
        ...

    async def generate_images_with_reference(
        self,
        model: str,
        prompt: str,
        reference: str,
        options: ReferenceGenerationOptions,
        credential: str,
    ) -> Sequence[str]:
        """Generate images guided by an uploaded reference and return their URLs."""
        ...


class RequestLoggerInterface(Protocol):
    """Protocol for request logging implementations."""

    def log_request(self, data: dict[str, Any]) -> None:
        """Log a request event with structured data.

        Args:
            data: Dictionary with request event data. Required keys:
                - event: Event type identifier (e.g., "api_request")
                - status: Request status ("success" or "error")
                - operation: Operation name ("completion", "completion_stream")
            Optional keys include request_id, model, image_count, latency_ms,
            error_type and error_message.
        """
        ...


__all__ = [
    "FetchResponse",
    "ImageBackendInterface",
    "ImageFetcherInterface",
    "RequestLoggerInterface",
]
