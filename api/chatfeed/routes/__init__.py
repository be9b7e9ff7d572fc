"""API routers."""

from .conversations import router as conversations_router
from .messages import router as messages_router

__all__ = ["conversations_router", "messages_router"]
