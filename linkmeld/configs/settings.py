"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI and the workers.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from linkmeld.configs.base import BaseSettings
from linkmeld.configs.blob_storage import BlobStorageSettings
from linkmeld.configs.celery_config import CelerySettings
from linkmeld.configs.database import DatabaseSettings
from linkmeld.configs.gemini import GeminiSettings
from linkmeld.configs.pipeline import PipelineSettings
from linkmeld.configs.vector_store import VectorStoreSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    vector_store: VectorStoreSettings = Field(default_factory=VectorStoreSettings)
    gemini: GeminiSettings = Field(default_factory=GeminiSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    celery: CelerySettings = Field(default_factory=CelerySettings)
    blob_storage: BlobStorageSettings = Field(default_factory=BlobStorageSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from linkmeld.configs import get_settings
        settings = get_settings()
    """
    return Settings()
