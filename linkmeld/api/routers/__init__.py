"""API routers."""

from .captures import router as captures_router
from .conversations import router as conversations_router
from .health import router as health_router

__all__ = [
    "captures_router",
    "conversations_router",
    "health_router",
]
