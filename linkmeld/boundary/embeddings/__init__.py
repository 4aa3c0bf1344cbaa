"""Embedding provider adapters."""

from linkmeld.boundary.embeddings.gemini_embedding_client import (
    EmbeddingResult,
    EmbeddingStatus,
    EmbeddingTaskType,
    GeminiEmbeddingClient,
)

__all__ = [
    "EmbeddingResult",
    "EmbeddingStatus",
    "EmbeddingTaskType",
    "GeminiEmbeddingClient",
]
