"""Value objects for the image chat gateway.

This module defines immutable value objects derived from a single completion
request: the parsed model identifier, the reference-image parse result, and
the generation size/options handed to the backend.

Design Principles:
    - Immutability: All value objects are frozen dataclasses (slots=True)
    - No I/O: Parsing here is pure string arithmetic
    - Never raise from parsing: malformed size text falls back to defaults

Key Value Objects:
    - ModelSpec: Base model name plus even target width/height
    - ReferenceParse: Prompt text with an optional downloaded reference image
    - GenerationSize / ReferenceGenerationOptions: Backend call parameters
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass

DEFAULT_DIMENSION = 1024
"""Width and height used when the identifier carries no size segment."""

SAMPLE_STRENGTH = 0.5
"""Sample-diversity strength for reference-guided generation."""

REFERENCE_STRENGTH = 0.5
"""Reference-influence strength for reference-guided generation."""

_SIZE_PATTERN = re.compile(r"(\d+)[\W\w](\d+)")


def round_up_to_even(value: int) -> int:
    """Round a dimension up to the nearest even integer (backend requirement)."""
    return math.ceil(value / 2) * 2


@dataclass(slots=True, frozen=True)
class ModelSpec:
    """Parsed compound model identifier.

    Attributes:
        model: Base model name (text before the first colon).
        width: Target width in pixels. Always even.
        height: Target height in pixels. Always even.
    """

    model: str
    width: int = DEFAULT_DIMENSION
    height: int = DEFAULT_DIMENSION

    @property
    def size(self) -> GenerationSize:
        return GenerationSize(width=self.width, height=self.height)


def parse_model_identifier(identifier: str) -> ModelSpec:
    """Parse ``"<name>"`` or ``"<name>:<W>x<H>"`` into a ModelSpec.

    The separator between width and height is matched permissively. Both
    dimensions are rounded up to the nearest even integer. A missing size
    segment, or one with no ``<digits><any char><digits>`` run, yields 1024x1024.

    Args:
        identifier: Compound model identifier.

    Returns:
        ModelSpec with base model name and even dimensions.

    Examples:
        >>> parse_model_identifier("jimeng-3.0:1023x767")
        ModelSpec(model='jimeng-3.0', width=1024, height=768)
        >>> parse_model_identifier("jimeng-3.0")
        ModelSpec(model='jimeng-3.0', width=1024, height=1024)
    """
    parts = identifier.split(":")
    model = parts[0]
    size = parts[1] if len(parts) > 1 else ""
    match = _SIZE_PATTERN.search(size) if size else None
    if match is None:
        return ModelSpec(model=model)
    width, height = (int(group) for group in match.groups())
    return ModelSpec(
        model=model,
        width=round_up_to_even(width),
        height=round_up_to_even(height),
    )


@dataclass(slots=True, frozen=True)
class GenerationSize:
    """Target output dimensions for plain generation."""

    width: int
    height: int

    def as_label(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(slots=True, frozen=True)
class ReferenceGenerationOptions:
    """Parameters for reference-guided generation.

    Attributes:
        width: Target width in pixels.
        height: Target height in pixels.
        sample_strength: Sample-diversity strength. Fixed at SAMPLE_STRENGTH.
        reference_strength: Reference-influence strength. Fixed at REFERENCE_STRENGTH.
    """

    width: int
    height: int
    sample_strength: float = SAMPLE_STRENGTH
    reference_strength: float = REFERENCE_STRENGTH

    def as_label(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(slots=True, frozen=True)
class ReferenceParse:
    """Result of scanning message text for a leading reference image URL.

    Invariant: ``image_url`` is set if and only if ``blob`` is set.

    Attributes:
        prompt: Remaining prompt text. Original text when no URL was found,
            possibly empty after stripping the URL.
        image_url: Reference image URL, or None.
        blob: Downloaded image bytes, or None.
        content_type: Content-Type reported by the image host, if any.
    """

    prompt: str
    image_url: str | None = None
    blob: bytes | None = None
    content_type: str | None = None

    def __post_init__(self) -> None:
        if (self.image_url is None) != (self.blob is None):
            raise ValueError("image_url and blob must be provided together")

    @property
    def has_reference(self) -> bool:
        return self.blob is not None
