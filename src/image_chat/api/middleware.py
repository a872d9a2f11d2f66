"""Middleware and global exception handlers for the API.

Middleware Stack:
    1. StructuredLoggingMiddleware: Logs all HTTP requests
    2. CORSMiddleware: Handles cross-origin requests
    3. Rate Limiting: Per-endpoint limits via @limiter.limit decorator
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from fastapi import Request, Response, status
from fastapi.exceptions import RequestValidationError as BodyValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from image_chat.api.dependencies import get_request_context
from image_chat.api.error_handlers import domain_error_response, error_response
from image_chat.core.config import settings
from image_chat.domain.exceptions import DomainError
from image_chat.telemetry.structured_logging import log_request_event

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)


def completion_rate_limit() -> str:
    return settings.api.rate_limit


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """Emits one ``http_request`` event per request, even when it fails."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        start_time = time.perf_counter()
        ctx = get_request_context(request)
        status_code: int | None = None
        error_type: str | None = None
        error_message: str | None = None
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["X-Request-ID"] = ctx.request_id
            return response
        except Exception as exc:
            status_code = getattr(exc, "status_code", status.HTTP_500_INTERNAL_SERVER_ERROR)
            error_type = type(exc).__name__
            error_message = str(exc)
            raise
        finally:
            event = {
                "event": "http_request",
                "request_id": ctx.request_id,
                "client_ip": ctx.client_ip,
                "path": request.url.path,
                "method": request.method,
                "status_code": status_code,
                "latency_ms": round((time.perf_counter() - start_time) * 1000, 3),
            }
            if error_type:
                event["error_type"] = error_type
                event["error_message"] = error_message
            log_request_event(event)


def setup_middleware(app: FastAPI) -> None:
    """Install logging, rate limiting and CORS on ``app``."""
    app.add_middleware(StructuredLoggingMiddleware)

    app.state.limiter = limiter

    cors_origins = settings.api.cors_origins
    allow_origins = (
        [origin.strip() for origin in cors_origins.split(",")] if cors_origins != "*" else ["*"]
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register handlers for domain errors, HTTP errors, 422, 429 and 500."""

    async def domain_exception_handler(request: Request, exc: DomainError) -> JSONResponse:
        return domain_error_response(exc, get_request_context(request))

    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        ctx = get_request_context(request)
        return error_response(
            exc.status_code,
            f"HTTP_{exc.status_code}",
            str(exc.detail),
            ctx.request_id,
            headers=exc.headers,
        )

    async def body_validation_handler(request: Request, exc: BodyValidationError) -> JSONResponse:
        ctx = get_request_context(request)
        errors = exc.errors()
        logger.warning("request_body_invalid: request_id=%s, errors=%s", ctx.request_id, errors)
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()))
        return error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "API_REQUEST_BODY_INVALID",
            f"Invalid request body at {location or 'body'}: {first.get('msg', 'invalid value')}",
            ctx.request_id,
        )

    async def rate_limit_exception_handler(
        request: Request, exc: RateLimitExceeded
    ) -> JSONResponse:
        ctx = get_request_context(request)
        logger.warning(
            "rate_limit_exceeded: request_id=%s, client_ip=%s", ctx.request_id, ctx.client_ip
        )
        return error_response(
            status.HTTP_429_TOO_MANY_REQUESTS,
            "API_RATE_LIMITED",
            f"Rate limit exceeded: {exc.detail}",
            ctx.request_id,
            headers={"Retry-After": "60"},
        )

    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        ctx = get_request_context(request)
        logger.exception(
            "unhandled_error: request_id=%s, error_type=%s", ctx.request_id, type(exc).__name__
        )
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "API_INTERNAL_ERROR",
            "Internal server error",
            ctx.request_id,
        )

    app.exception_handler(DomainError)(domain_exception_handler)
    app.exception_handler(HTTPException)(http_exception_handler)
    app.exception_handler(BodyValidationError)(body_validation_handler)
    app.exception_handler(RateLimitExceeded)(rate_limit_exception_handler)
    app.exception_handler(Exception)(unhandled_error_handler)


__all__ = [
    "StructuredLoggingMiddleware",
    "completion_rate_limit",
    "limiter",
    "setup_exception_handlers",
    "setup_middleware",
]
