"""Application lifespan management.

Lifespan Responsibilities:
    - Startup:
        1. Create the reference-image fetcher and backend client (httpx pools)
        2. Build the completion use case with the configured retry policy
        3. Register it via set_dependencies()
    - Shutdown:
        1. Unregister dependencies
        2. Close both httpx connection pools
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from image_chat.api.dependencies import set_dependencies
from image_chat.application.use_cases import CompletionUseCase
from image_chat.core.config import settings
from image_chat.core.resilience import RetryPolicy
from image_chat.infrastructure.adapters import HttpImageFetcher, RequestLoggerAdapter
from image_chat.infrastructure.backend_client import AsyncImageBackendClient, BackendClientConfig

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan_context(app: FastAPI) -> AsyncIterator[None]:
    """Build collaborators on startup and release them on shutdown."""
    fetcher = HttpImageFetcher(
        timeout=settings.client.fetch_timeout,
        max_connections=settings.client.max_connections,
    )
    backend = AsyncImageBackendClient(
        BackendClientConfig(
            base_url=settings.backend.base_url,
            timeout=settings.backend.timeout,
            max_connections=settings.client.max_connections,
        )
    )
    use_case = CompletionUseCase(
        fetcher,
        backend,
        RequestLoggerAdapter(),
        retry_policy=RetryPolicy(
            max_retries=settings.retry.max_retries,
            delay_seconds=settings.retry.delay_seconds,
        ),
        default_model=settings.generation.default_model,
    )
    set_dependencies(use_case)
    logger.info(
        "startup_complete: backend=%s, default_model=%s, max_retries=%s",
        settings.backend.base_url,
        settings.generation.default_model,
        settings.retry.max_retries,
    )

    try:
        yield
    finally:
        set_dependencies(None)
        await fetcher.close()
        await backend.close()
        logger.info("shutdown_complete")
