"""Image chat gateway.

Answers OpenAI-style chat completion requests with generated images. The last
message is used as the prompt; a leading image URL turns it into a
reference-guided generation; the model identifier may carry a target size,
e.g. ``doubao-seedream-4-5-251128:1920x1080``.
"""

from image_chat.application.use_cases import CompletionUseCase
from image_chat.domain import (
    ChatMessage,
    DomainError,
    GenerationError,
    ModelSpec,
    RemoteResourceError,
    RequestValidationError,
    parse_model_identifier,
)

__version__ = "1.0.0"

__all__ = [
    "ChatMessage",
    "CompletionUseCase",
    "DomainError",
    "GenerationError",
    "ModelSpec",
    "RemoteResourceError",
    "RequestValidationError",
    "__version__",
    "parse_model_identifier",
]
