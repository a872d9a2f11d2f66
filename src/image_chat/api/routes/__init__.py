"""API route modules."""

from image_chat.api.routes.chat import router as chat_router
from image_chat.api.routes.system import router as system_router

__all__ = ["chat_router", "system_router"]
