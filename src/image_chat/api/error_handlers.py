"""Mapping of domain exceptions to HTTP error responses.

Error Handling Strategy:
    - RequestValidationError, RemoteResourceError -> 400 Bad Request
    - GenerationError -> 502 Bad Gateway
    - Any other DomainError -> 500 Internal Server Error

Every error body has the shape ``{"error": {"code", "message", "request_id"}}``.
"""

from __future__ import annotations

import logging

from fastapi import status
from fastapi.responses import JSONResponse

from image_chat.api.models import ErrorDetail, ErrorResponse, RequestContext
from image_chat.domain.exceptions import (
    DomainError,
    GenerationError,
    RemoteResourceError,
    RequestValidationError,
)
from image_chat.telemetry.structured_logging import log_request_event

logger = logging.getLogger(__name__)


def status_for_domain_error(exc: DomainError) -> int:
    match exc:
        case RequestValidationError() | RemoteResourceError():
            return status.HTTP_400_BAD_REQUEST
        case GenerationError():
            return status.HTTP_502_BAD_GATEWAY
        case _:
            return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(
    status_code: int,
    code: str,
    message: str,
    request_id: str | None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=code, message=message, request_id=request_id))
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


def domain_error_response(exc: DomainError, ctx: RequestContext) -> JSONResponse:
    """Log ``exc`` and convert it to a JSON error response."""
    status_code = status_for_domain_error(exc)
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("domain_error: request_id=%s, code=%s, error=%s", ctx.request_id, exc.code, exc)
    else:
        logger.warning("domain_error: request_id=%s, code=%s, error=%s", ctx.request_id, exc.code, exc)
    log_request_event(
        {
            "event": "api_error",
            "request_id": ctx.request_id,
            "error_type": type(exc).__name__,
            "error_code": exc.code,
            "error_message": str(exc),
            "http_status": status_code,
        }
    )
    return error_response(status_code, exc.code, str(exc), ctx.request_id)


__all__ = ["domain_error_response", "error_response", "status_for_domain_error"]
