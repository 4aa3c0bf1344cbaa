"""
Vector database schemas.

Pydantic models for points written to and results read from the
document collection.

Dependencies: pydantic
System role: Type definitions for vector operations
"""

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field

# Namespace for deterministic point ids (uuid5 over user/document/chunk)
POINT_ID_NAMESPACE = uuid.UUID("8f4c1a52-6d0b-4e8e-9c43-2f3b7f1d5a10")


class ChunkPayload(BaseModel):
    """
    Payload stored next to each chunk vector.

    user_id and document_id are the filter keys for search and delete.
    """

    text: str = Field(description="Chunk text returned to the prompt builder")
    user_id: str = Field(description="Owner of the capture")
    document_id: str = Field(description="Capture the chunk belongs to")
    chunk_index: int = Field(ge=0, description="Position of the chunk in the document")
    created_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        description="ISO-8601 indexing timestamp",
    )


class IndexPoint(BaseModel):
    """Point ready for upsert."""

    id: str = Field(description="Point UUID")
    vector: list[float] = Field(description="Chunk embedding")
    payload: ChunkPayload


class VectorSearchResult(BaseModel):
    """Single result from vector search."""

    point_id: str = Field(description="Point identifier")
    text: str = Field(description="Chunk text content")
    chunk_index: int | None = Field(default=None, description="Chunk position in the document")
    score: float = Field(description="Cosine similarity score")


def point_id_for(user_id: str, document_id: str, chunk_index: int) -> str:
    """
    Deterministic point id for a chunk.

    Re-indexing the same document overwrites its points instead of adding
    duplicates.
    """
    return str(uuid.uuid5(POINT_ID_NAMESPACE, f"{user_id}:{document_id}:{chunk_index}"))
