"""FastAPI dependencies."""

from linkmeld.api.deps.dependencies import (
    ServiceCache,
    get_api_key,
    get_conversation_service,
    get_current_user,
    get_orchestrator,
    get_service_cache,
)

__all__ = [
    "ServiceCache",
    "get_api_key",
    "get_conversation_service",
    "get_current_user",
    "get_orchestrator",
    "get_service_cache",
]
