"""Application layer for the image chat gateway.

Use cases orchestrate domain logic and depend only on the Protocols in
:mod:`image_chat.application.interfaces`.
"""

from image_chat.application.generation import (
    GenerationDispatcher,
    ReferenceExtractor,
    match_reference_url,
)
from image_chat.application.interfaces import (
    FetchResponse,
    ImageBackendInterface,
    ImageFetcherInterface,
    RequestLoggerInterface,
)
from image_chat.application.use_cases import CompletionUseCase

__all__ = [
    "CompletionUseCase",
    "FetchResponse",
    "GenerationDispatcher",
    "ImageBackendInterface",
    "ImageFetcherInterface",
    "ReferenceExtractor",
    "RequestLoggerInterface",
    "match_reference_url",
]
