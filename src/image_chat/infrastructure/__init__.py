"""Infrastructure layer: httpx-backed collaborators and logging adapters."""

from image_chat.infrastructure.adapters import HttpImageFetcher, RequestLoggerAdapter
from image_chat.infrastructure.backend_client import (
    AsyncImageBackendClient,
    BackendClientConfig,
    resolve_image_mime,
)

__all__ = [
    "AsyncImageBackendClient",
    "BackendClientConfig",
    "HttpImageFetcher",
    "RequestLoggerAdapter",
    "resolve_image_mime",
]
