"""Dependency injection for FastAPI endpoints.

The completion use case is built during lifespan startup and registered with
:func:`set_dependencies`. Getters raise 503 until that has happened, so tests
can register mocks the same way.
"""

from __future__ import annotations

import logging
import uuid
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from slowapi.util import get_remote_address

from image_chat.api.models import RequestContext
from image_chat.application.use_cases import CompletionUseCase

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

# Global instances (initialized in lifespan)
_completion_use_case: CompletionUseCase | None = None


def set_dependencies(completion_use_case: CompletionUseCase | None) -> None:
    """Register (or clear, with None) the completion use case."""
    global _completion_use_case
    _completion_use_case = completion_use_case


def validate_dependencies() -> dict[str, bool]:
    return {"completion_use_case": _completion_use_case is not None}


def get_completion_use_case() -> CompletionUseCase:
    """Get the completion use case.

    Raises:
        HTTPException: 503 if the use case has not been registered.
    """
    if _completion_use_case is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Completion use case not initialized",
        )
    return _completion_use_case


def get_credential(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> str:
    """Extract the backend credential from ``Authorization: Bearer <token>``.

    Raises:
        HTTPException: 401 if the header is missing, not a bearer token, or blank.
    """
    token = credentials.credentials.strip() if credentials else ""
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer credential",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token


def get_request_context(request: Request) -> RequestContext:
    """Extract (or reuse) the request context stored on ``request.state``.

    Middleware, handlers and exception handlers all see the same request_id.
    """
    ctx: RequestContext | None = getattr(request.state, "request_context", None)
    if ctx is None:
        ctx = RequestContext(
            request_id=request.headers.get("x-request-id") or uuid.uuid4().hex,
            client_ip=get_remote_address(request),
            user_agent=request.headers.get("user-agent"),
        )
        request.state.request_context = ctx
    return ctx


CompletionUseCaseDep = Annotated[CompletionUseCase, Depends(get_completion_use_case)]
CredentialDep = Annotated[str, Depends(get_credential)]

__all__ = [
    "CompletionUseCaseDep",
    "CredentialDep",
    "get_completion_use_case",
    "get_credential",
    "get_request_context",
    "set_dependencies",
    "validate_dependencies",
]
