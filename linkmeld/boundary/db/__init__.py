"""Database layer: ORM models, connection management and the capture repository."""

from linkmeld.boundary.db.base import Base
from linkmeld.boundary.db.capture_model import CaptureModel
from linkmeld.boundary.db.capture_repository import CaptureRepository
from linkmeld.boundary.db.connection import get_async_engine, get_async_session_factory

__all__ = [
    "Base",
    "CaptureModel",
    "CaptureRepository",
    "get_async_engine",
    "get_async_session_factory",
]
