"""Asynchronous client for an OpenAI-images compatible generation backend.

Generation calls are ``POST {base_url}/images/generations`` with a bearer
credential supplied per call. Reference images are passed inline as data
URIs, so "uploading" a reference is a local encoding step.

Key behaviors:
    - Uses a pooled httpx.AsyncClient, created lazily
    - Raises GenerationError for status, transport and payload errors
    - Returns image URLs in the order the backend lists them
"""

from __future__ import annotations

import base64
import io
import json
import logging
import time
import types
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import httpx
from PIL import Image, UnidentifiedImageError

from image_chat.domain.exceptions import GenerationError

if TYPE_CHECKING:
    from image_chat.domain.value_objects import GenerationSize, ReferenceGenerationOptions

logger = logging.getLogger(__name__)

GENERATIONS_PATH = "/images/generations"

DEFAULT_IMAGE_MIME = "image/jpeg"


def resolve_image_mime(blob: bytes, content_type: str | None = None) -> str:
    """Pick the MIME type for a reference image data URI.

    The host's Content-Type wins when it names an image type. Otherwise the
    format is read with Pillow, and unrecognised data falls back to
    ``image/jpeg``.
    """
    mime = (content_type or "").split(";")[0].strip().lower()
    if mime == "image/jpg":
        mime = "image/jpeg"
    if mime.startswith("image/"):
        return mime

    try:
        with Image.open(io.BytesIO(blob)) as img:
            detected = Image.MIME.get(img.format or "")
    except UnidentifiedImageError:
        logger.debug("reference_image_format_unknown: bytes=%s", len(blob))
        return DEFAULT_IMAGE_MIME
    return detected or DEFAULT_IMAGE_MIME


@dataclass(slots=True, frozen=True)
class BackendClientConfig:
    """Configuration for the backend client.

    Attributes:
        base_url: Backend API root, e.g. ``https://api.example.com/v1``.
        timeout: Read timeout in seconds. Generation is slow.
        max_connections: Connection pool size.
        client_timeout: Custom httpx.Timeout (None = derive from ``timeout``).
    """

    base_url: str = "https://api.cometapi.com/v1"
    timeout: float = 600.0
    max_connections: int = 50
    client_timeout: httpx.Timeout | None = field(default=None, repr=False)


class AsyncImageBackendClient:
    """ImageBackendInterface implementation over httpx."""

    def __init__(self, config: BackendClientConfig | None = None) -> None:
        self.config = config or BackendClientConfig()
        self.client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> AsyncImageBackendClient:
        self._ensure_client()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        await self.close()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self.client is None:
            timeout = self.config.client_timeout or httpx.Timeout(
                connect=10.0,
                read=self.config.timeout,
                write=30.0,
                pool=10.0,
            )
            self.client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=timeout,
                limits=httpx.Limits(max_connections=self.config.max_connections),
            )
        return self.client

    async def close(self) -> None:
        if self.client is not None:
            await self.client.aclose()
            self.client = None

    async def upload_reference_image(
        self,
        blob: bytes,
        credential: str,
        content_type: str | None = None,
    ) -> str:
        """Encode ``blob`` as a data URI accepted in the ``image`` field.

        Raises:
            GenerationError: If ``credential`` is empty.
        """
        _require_credential(credential)
        encoded = base64.b64encode(blob).decode("ascii")
        return f"data:{resolve_image_mime(blob, content_type)};base64,{encoded}"

    async def generate_images(
        self,
        model: str,
        prompt: str,
        size: GenerationSize,
        credential: str,
    ) -> list[str]:
        payload = {
            "model": model,
            "prompt": prompt,
            "size": size.as_label(),
            "response_format": "url",
        }
        return await self._post_generation(payload, credential)

    async def generate_images_with_reference(
        self,
        model: str,
        prompt: str,
        reference: str,
        options: ReferenceGenerationOptions,
        credential: str,
    ) -> list[str]:
        payload = {
            "model": model,
            "prompt": prompt,
            "size": options.as_label(),
            "response_format": "url",
            "image": reference,
            "sample_strength": options.sample_strength,
            "reference_strength": options.reference_strength,
        }
        return await self._post_generation(payload, credential)

    async def _post_generation(self, payload: dict[str, Any], credential: str) -> list[str]:
        _require_credential(credential)
        client = self._ensure_client()
        start_time = time.perf_counter()
        try:
            response = await client.post(
                GENERATIONS_PATH,
                json=payload,
                headers={"Authorization": f"Bearer {credential}"},
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            detail = _error_detail(exc.response)
            logger.error(
                "backend_http_error: model=%s, status=%s, detail=%s",
                payload["model"],
                exc.response.status_code,
                detail,
            )
            msg = f"Backend returned HTTP {exc.response.status_code}: {detail}"
            raise GenerationError(msg) from exc
        except httpx.RequestError as exc:
            logger.error("backend_request_error: model=%s, error=%s", payload["model"], exc)
            msg = f"Backend request failed: {exc.__class__.__name__}: {exc}"
            raise GenerationError(msg) from exc
        except json.JSONDecodeError as exc:
            raise GenerationError("Backend returned a non-JSON response") from exc

        image_urls = _extract_image_urls(data)
        logger.info(
            "backend_generation_complete: model=%s, size=%s, images=%s, latency_ms=%.1f",
            payload["model"],
            payload["size"],
            len(image_urls),
            (time.perf_counter() - start_time) * 1000,
        )
        return image_urls


def _require_credential(credential: str) -> None:
    if not credential or not credential.strip():
        raise GenerationError("Missing backend credential")


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    match body:
        case {"error": {"message": str(message)}}:
            return message
        case {"error": str(message)}:
            return message
        case {"message": str(message)}:
            return message
        case _:
            return response.text[:200]


def _extract_image_urls(data: Any) -> list[str]:
    match data:
        case {"data": list(items)}:
            pass
        case _:
            raise GenerationError("Backend response is missing the 'data' list")
    return [
        item["url"]
        for item in items
        if isinstance(item, dict) and isinstance(item.get("url"), str) and item["url"]
    ]


__all__ = [
    "AsyncImageBackendClient",
    "BackendClientConfig",
    "GENERATIONS_PATH",
    "resolve_image_mime",
]
