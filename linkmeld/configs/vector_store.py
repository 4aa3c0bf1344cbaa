"""
Vector store configuration settings.

Manages Qdrant connection and collection parameters for the document index.

Dependencies: pydantic, pydantic_settings
System role: Vector database configuration for RAG retrieval
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from linkmeld.configs.base import BaseSettings


class VectorStoreSettings(BaseSettings):
    """Qdrant vector store configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="QDRANT_",
        case_sensitive=False,
        extra="ignore",
    )

    url: str = Field(default="http://localhost:6333", description="Qdrant HTTP URL")
    api_key: str | None = Field(default=None, description="Qdrant API key (cloud deployments)")
    timeout_s: int = Field(default=30, description="Qdrant request timeout in seconds")

    collection_name: str = Field(default="documents", description="Collection holding capture chunks")
    vector_size: int = Field(
        default=3072,
        description="Embedding dimension (gemini-embedding-001 default output size)",
    )
    top_k: int = Field(default=5, description="Number of chunks returned by similarity search")
