"""Vector store adapters (Qdrant)."""

from linkmeld.boundary.vdb.client import build_qdrant_client
from linkmeld.boundary.vdb.vector_index_gateway import VectorIndexGateway
from linkmeld.boundary.vdb.vector_schemas import (
    ChunkPayload,
    IndexPoint,
    VectorSearchResult,
    point_id_for,
)

__all__ = [
    "ChunkPayload",
    "IndexPoint",
    "VectorIndexGateway",
    "VectorSearchResult",
    "build_qdrant_client",
    "point_id_for",
]
