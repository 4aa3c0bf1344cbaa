"""
Qdrant async client factory.

Dependencies: qdrant_client
System role: Builds the process-wide vector store client
"""

from qdrant_client import AsyncQdrantClient

from linkmeld.configs.vector_store import VectorStoreSettings


def build_qdrant_client(settings: VectorStoreSettings | None = None) -> AsyncQdrantClient:
    """Create AsyncQdrantClient. Use one shared client per process."""
    s = settings or VectorStoreSettings()
    return AsyncQdrantClient(
        url=s.url,
        api_key=s.api_key,
        timeout=s.timeout_s,
    )
