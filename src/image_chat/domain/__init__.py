"""Domain layer for the image chat gateway.

This package contains pure domain models, value objects, and business rules
with no dependencies on frameworks, infrastructure, or external libraries.
"""

from image_chat.domain.entities import VALID_ROLES, ChatMessage
from image_chat.domain.exceptions import (
    DomainError,
    GenerationError,
    RemoteResourceError,
    RequestValidationError,
)
from image_chat.domain.value_objects import (
    REFERENCE_STRENGTH,
    SAMPLE_STRENGTH,
    GenerationSize,
    ModelSpec,
    ReferenceGenerationOptions,
    ReferenceParse,
    parse_model_identifier,
)

__all__ = [
    "REFERENCE_STRENGTH",
    "SAMPLE_STRENGTH",
    "VALID_ROLES",
    "ChatMessage",
    "DomainError",
    "GenerationError",
    "GenerationSize",
    "ModelSpec",
    "ReferenceGenerationOptions",
    "ReferenceParse",
    "RemoteResourceError",
    "RequestValidationError",
    "parse_model_identifier",
]
