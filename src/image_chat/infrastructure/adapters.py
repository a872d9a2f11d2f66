"""Infrastructure adapters implementing application layer interfaces.

Key Adapters:
    - HttpImageFetcher: httpx GET for reference images (ImageFetcherInterface)
    - RequestLoggerAdapter: Wraps structured logging (RequestLoggerInterface)
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from image_chat.application.interfaces import FetchResponse
from image_chat.telemetry.structured_logging import log_request_event

logger = logging.getLogger(__name__)


class HttpImageFetcher:
    """Downloads reference images over HTTP.

    Non-2xx responses are returned as ``FetchResponse(ok=False, ...)``; only
    transport failures raise.

    Attributes:
        _client: Shared httpx.AsyncClient. Created lazily when not injected.
        _owns_client: Whether :meth:`close` should close the client.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout: float = 30.0,
        max_connections: int = 50,
    ) -> None:
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout
        self._max_connections = max_connections

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                limits=httpx.Limits(max_connections=self._max_connections),
                follow_redirects=True,
            )
        return self._client

    async def fetch(self, url: str) -> FetchResponse:
        """GET ``url`` and return status and body.

        Raises:
            ConnectionError: If ``url`` cannot be parsed or the request fails
                at the transport level.
        """
        client = self._ensure_client()
        try:
            response = await client.get(url)
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            logger.warning("image_fetch_failed: url=%s, error=%s", url, exc)
            msg = f"{exc.__class__.__name__}: {exc}"
            raise ConnectionError(msg) from exc

        return FetchResponse(
            ok=response.is_success,
            status=response.status_code,
            body=response.content,
            content_type=response.headers.get("content-type"),
        )

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None


class RequestLoggerAdapter:
    """Adapter that wraps structured logging to implement RequestLoggerInterface.

    Stateless; delegates to :func:`log_request_event`.
    """

    @staticmethod
    def log_request(data: dict[str, Any]) -> None:
        log_request_event(data)


__all__ = ["HttpImageFetcher", "RequestLoggerAdapter"]
