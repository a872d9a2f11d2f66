"""Domain exceptions for the image chat gateway.

This module defines pure domain exceptions with no framework dependencies.
Each exception carries a stable ``code`` string that the API layer surfaces
to clients alongside the human-readable message.

Exception Hierarchy:
    - DomainError: Base exception for all domain errors
    - RequestValidationError: Malformed or empty completion request
    - RemoteResourceError: Reference image could not be downloaded
    - GenerationError: Upload or generation backend failure
"""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for all domain errors.

    This exception should not be raised directly. Use specific subclasses
    like RequestValidationError or GenerationError instead.
    """

    code = "API_ERROR"


class RequestValidationError(DomainError):
    """Raised when a completion request violates business rules.

    Common causes:
        - Empty message sequence
        - Last message carries no text content

    Note:
        The condition is deterministic, so retrying the request cannot help.
    """

    code = "API_REQUEST_PARAMS_INVALID"


class RemoteResourceError(DomainError):
    """Raised when a reference image URL cannot be fetched.

    Attributes:
        url: The offending image URL. Always included in the message.
    """

    code = "API_FILE_URL_INVALID"

    def __init__(self, url: str, reason: str | None = None) -> None:
        message = f"Unable to download image: {url}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.url = url


class GenerationError(DomainError):
    """Raised when the upload or generation backend fails.

    The message text is backend-defined and is shown verbatim to streaming
    consumers inside the error chunk.
    """

    code = "API_IMAGE_GENERATION_FAILED"
