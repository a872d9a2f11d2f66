"""FastAPI application for the image chat gateway.

Endpoints:
    - GET /health - Health check
    - GET /v1/models - List supported base models
    - POST /v1/chat/completions - Image generation via chat completions
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from image_chat.api.lifespan import lifespan_context
from image_chat.api.middleware import setup_exception_handlers, setup_middleware
from image_chat.api.routes import chat_router, system_router
from image_chat.core.config import settings

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.api.title,
    description="OpenAI-compatible chat completions that answer with generated images",
    version=settings.api.version,
    lifespan=lifespan_context,
)

setup_middleware(app)
setup_exception_handlers(app)

app.include_router(system_router)
app.include_router(chat_router, prefix="/v1")


@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    return {
        "service": settings.api.title,
        "version": settings.api.version,
        "docs": "/docs",
        "health": "/health",
    }
