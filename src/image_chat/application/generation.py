"""Reference extraction and generation dispatch.

``ReferenceExtractor`` separates a leading image URL from the prompt text and
downloads it. ``GenerationDispatcher`` chooses between plain and
reference-guided generation based solely on whether a reference was found.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from image_chat.domain.exceptions import DomainError, GenerationError, RemoteResourceError
from image_chat.domain.value_objects import ReferenceGenerationOptions, ReferenceParse

if TYPE_CHECKING:
    from image_chat.application.interfaces import ImageBackendInterface, ImageFetcherInterface
    from image_chat.domain.value_objects import ModelSpec

logger = logging.getLogger(__name__)

_IMAGE_URL_PATTERN = re.compile(r"^(https?://[^\s]+\.(jpg|jpeg|png|webp))", re.IGNORECASE)


def match_reference_url(text: str) -> str | None:
    """Return the image URL at the very start of ``text``, if any."""
    match = _IMAGE_URL_PATTERN.match(text)
    return match.group(0) if match else None


class ReferenceExtractor:
    """Detects and downloads a reference image embedded in message text."""

    def __init__(self, fetcher: ImageFetcherInterface) -> None:
        self._fetcher = fetcher

    async def extract(self, text: str) -> ReferenceParse:
        """Split ``text`` into prompt and optional reference image.

        Without a leading image URL the text is returned unchanged as the
        prompt and no request is made.

        Raises:
            RemoteResourceError: If the image download fails or returns non-2xx.
        """
        image_url = match_reference_url(text)
        if image_url is None:
            return ReferenceParse(prompt=text)

        prompt = text[len(image_url) :].strip()
        try:
            response = await self._fetcher.fetch(image_url)
        except (ConnectionError, TimeoutError) as exc:
            raise RemoteResourceError(image_url, str(exc)) from exc
        if not response.ok:
            raise RemoteResourceError(image_url, f"HTTP {response.status}")

        logger.info("reference_image_fetched: url=%s, bytes=%s", image_url, len(response.body))
        return ReferenceParse(
            prompt=prompt,
            image_url=image_url,
            blob=response.body,
            content_type=response.content_type,
        )


class GenerationDispatcher:
    """Runs exactly one of the two generation strategies per request."""

    def __init__(self, backend: ImageBackendInterface) -> None:
        self._backend = backend

    async def dispatch(
        self,
        spec: ModelSpec,
        reference: ReferenceParse,
        credential: str,
    ) -> list[str]:
        """Generate images for ``reference.prompt`` and return their URLs.

        With a reference blob the image is uploaded first and the
        reference-guided strategy is used; otherwise plain generation runs.

        Raises:
            GenerationError: If the upload or generation call fails. Domain
                errors raised by the backend pass through unchanged.
        """
        try:
            if reference.blob is not None:
                handle = await self._backend.upload_reference_image(
                    reference.blob, credential, reference.content_type
                )
                image_urls = await self._backend.generate_images_with_reference(
                    spec.model,
                    reference.prompt,
                    handle,
                    ReferenceGenerationOptions(width=spec.width, height=spec.height),
                    credential,
                )
            else:
                image_urls = await self._backend.generate_images(
                    spec.model,
                    reference.prompt,
                    spec.size,
                    credential,
                )
        except DomainError:
            raise
        except Exception as exc:
            raise GenerationError(str(exc) or type(exc).__name__) from exc
        return list(image_urls)


__all__ = ["GenerationDispatcher", "ReferenceExtractor", "match_reference_url"]
