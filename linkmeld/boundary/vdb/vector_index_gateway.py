"""
Vector index gateway over Qdrant.

Owns the document collection lifecycle and the three operations the pipeline
needs: index a document's chunks, delete them, and run a similarity search
scoped to one user's document. Every Qdrant call is a suspension point and
writes go through with_retry.

Dependencies: qdrant_client, linkmeld.core.chunking, linkmeld.boundary.embeddings
System role: Vector index lifecycle and filtered retrieval
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from qdrant_client import AsyncQdrantClient
from qdrant_client.http import models as qdrant_models
from qdrant_client.http.exceptions import UnexpectedResponse

from linkmeld.boundary.embeddings.gemini_embedding_client import (
    EmbeddingStatus,
    EmbeddingTaskType,
    GeminiEmbeddingClient,
)
from linkmeld.boundary.vdb.vector_schemas import (
    ChunkPayload,
    IndexPoint,
    VectorSearchResult,
    point_id_for,
)
from linkmeld.configs.pipeline import PipelineSettings
from linkmeld.configs.vector_store import VectorStoreSettings
from linkmeld.core.chunking import split_into_chunks
from linkmeld.core.exceptions import QueryEmbeddingError, VectorStoreError
from linkmeld.core.retry import with_retry

logger = logging.getLogger(__name__)

PAYLOAD_INDEXES = ("user_id", "document_id")


def document_filter(user_id: str, document_id: str) -> qdrant_models.Filter:
    """Filter matching every point of one user's document."""
    return qdrant_models.Filter(
        must=[
            qdrant_models.FieldCondition(
                key="user_id",
                match=qdrant_models.MatchValue(value=user_id),
            ),
            qdrant_models.FieldCondition(
                key="document_id",
                match=qdrant_models.MatchValue(value=document_id),
            ),
        ]
    )


class VectorIndexGateway:
    """Per-user, per-document chunk index backed by a Qdrant collection."""

    def __init__(
        self,
        client: AsyncQdrantClient,
        embedder: GeminiEmbeddingClient,
        settings: VectorStoreSettings | None = None,
        pipeline_settings: PipelineSettings | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize gateway.

        Args:
            client: Shared AsyncQdrantClient
            embedder: Embedding client for chunks and queries
            settings: Collection name, vector size and default top-k
            pipeline_settings: Chunk size and retry budgets
            sleep: Retry sleep function (injectable for tests)
        """
        self._client = client
        self._embedder = embedder
        self._settings = settings or VectorStoreSettings()
        self._pipeline = pipeline_settings or PipelineSettings()
        self._sleep = sleep
        self._ready_collections: set[str] = set()

    @property
    def collection_name(self) -> str:
        return self._settings.collection_name

    async def ensure_collection(self, name: str | None = None) -> None:
        """
        Create the collection with cosine distance if it does not exist.

        Idempotent; a collection created concurrently by another worker
        is accepted.

        Args:
            name: Collection name (defaults to the configured one)
        """
        collection = name or self.collection_name
        if collection in self._ready_collections:
            return

        try:
            exists = await self._client.collection_exists(collection)
            if not exists:
                logger.info(
                    f"{__name__}:ensure_collection - Creating collection",
                    extra={"collection": collection, "vector_size": self._settings.vector_size},
                )
                try:
                    await self._client.create_collection(
                        collection_name=collection,
                        vectors_config=qdrant_models.VectorParams(
                            size=self._settings.vector_size,
                            distance=qdrant_models.Distance.COSINE,
                        ),
                    )
                except UnexpectedResponse as e:
                    if e.status_code != 409:
                        raise
                    logger.info(f"{__name__}:ensure_collection - Collection created concurrently")

                for field in PAYLOAD_INDEXES:
                    await self._client.create_payload_index(
                        collection_name=collection,
                        field_name=field,
                        field_schema=qdrant_models.PayloadSchemaType.KEYWORD,
                    )
        except UnexpectedResponse as e:
            raise VectorStoreError(
                f"Failed to ensure collection {collection}: {e}",
                operation="ensure_collection",
            ) from e

        self._ready_collections.add(collection)

    async def index_document(
        self,
        text: str,
        document_id: str,
        user_id: str,
        api_key: str,
    ) -> int:
        """
        Chunk, embed and upsert a document's text.

        Chunks whose embedding is skipped are dropped. When nothing could be
        embedded the call is a logged no-op. Existing points of the document
        are removed before the new batch is written.

        Args:
            text: Clean document text
            document_id: Capture ID
            user_id: Owner ID
            api_key: User's Gemini API key

        Returns:
            int: Number of points written
        """
        chunks = split_into_chunks(text, self._pipeline.chunk_max_length)
        logger.info(
            f"{__name__}:index_document - Chunked document",
            extra={"document_id": document_id, "chunk_count": len(chunks)},
        )

        points: list[IndexPoint] = []
        for chunk in chunks:
            result = await self._embedder.embed(
                chunk.text,
                api_key,
                EmbeddingTaskType.DOCUMENT,
                max_retries=self._pipeline.embed_max_retries,
                initial_delay=self._pipeline.embed_initial_delay_s,
            )
            if result.status == EmbeddingStatus.FATAL:
                logger.error(
                    f"{__name__}:index_document - Embedding aborted at chunk "
                    f"{chunk.sequence_index}: {result.reason}",
                    extra={"document_id": document_id},
                )
                break
            if not result.ok:
                logger.warning(
                    f"{__name__}:index_document - Skipping chunk {chunk.sequence_index}: {result.reason}",
                    extra={"document_id": document_id},
                )
                continue

            points.append(
                IndexPoint(
                    id=point_id_for(user_id, document_id, chunk.sequence_index),
                    vector=result.vector,
                    payload=ChunkPayload(
                        text=chunk.text,
                        user_id=user_id,
                        document_id=document_id,
                        chunk_index=chunk.sequence_index,
                    ),
                )
            )

        if not points:
            logger.warning(
                f"{__name__}:index_document - No valid embeddings, nothing indexed",
                extra={"document_id": document_id},
            )
            return 0

        await self._with_write_retry(self.ensure_collection, "ensure_collection")
        await self._delete_points(user_id, document_id)
        await self._with_write_retry(
            lambda: self._client.upsert(
                collection_name=self.collection_name,
                points=[
                    qdrant_models.PointStruct(
                        id=point.id,
                        vector=point.vector,
                        payload=point.payload.model_dump(),
                    )
                    for point in points
                ],
                wait=True,
            ),
            "upsert",
        )

        logger.info(
            f"{__name__}:index_document - Indexed {len(points)}/{len(chunks)} chunks",
            extra={"document_id": document_id, "user_id": user_id},
        )
        return len(points)

    async def delete_document(self, document_id: str, user_id: str) -> None:
        """
        Delete every point of a user's document (filtered delete).

        Args:
            document_id: Capture ID
            user_id: Owner ID
        """
        await self._with_write_retry(self.ensure_collection, "ensure_collection")
        await self._delete_points(user_id, document_id)
        logger.info(
            f"{__name__}:delete_document - Deleted document points",
            extra={"document_id": document_id, "user_id": user_id},
        )

    async def search(
        self,
        query: str,
        user_id: str,
        document_id: str,
        api_key: str,
        top_k: int | None = None,
    ) -> list[VectorSearchResult]:
        """
        Similarity search scoped to one user's document.

        Args:
            query: Retrieval query text
            user_id: Owner ID
            document_id: Capture ID
            api_key: User's Gemini API key
            top_k: Maximum results (defaults to configured top_k)

        Returns:
            list[VectorSearchResult]: Matches ordered by similarity

        Raises:
            QueryEmbeddingError: Query could not be embedded
            VectorStoreError: Qdrant search failed
        """
        result = await self._embedder.embed(
            query,
            api_key,
            EmbeddingTaskType.QUERY,
            max_retries=self._pipeline.embed_max_retries,
            initial_delay=self._pipeline.embed_initial_delay_s,
        )
        if not result.ok:
            raise QueryEmbeddingError(
                "Failed to generate vector for the query",
                details={"reason": result.reason, "status": result.status.value},
            )

        limit = top_k or self._settings.top_k
        try:
            await self.ensure_collection()
            response = await self._client.query_points(
                collection_name=self.collection_name,
                query=result.vector,
                query_filter=document_filter(user_id, document_id),
                limit=limit,
                with_payload=True,
            )
        except VectorStoreError:
            raise
        except Exception as e:
            raise VectorStoreError(f"Similarity search failed: {e}", operation="search") from e

        matches = [
            VectorSearchResult(
                point_id=str(point.id),
                text=(point.payload or {}).get("text", ""),
                chunk_index=(point.payload or {}).get("chunk_index"),
                score=point.score,
            )
            for point in response.points
        ]
        logger.info(
            f"{__name__}:search - Retrieved {len(matches)} chunks",
            extra={"document_id": document_id, "top_k": limit},
        )
        return matches

    async def _delete_points(self, user_id: str, document_id: str) -> None:
        await self._with_write_retry(
            lambda: self._client.delete(
                collection_name=self.collection_name,
                points_selector=qdrant_models.FilterSelector(
                    filter=document_filter(user_id, document_id),
                ),
                wait=True,
            ),
            "delete",
        )

    async def _with_write_retry(self, operation, operation_name: str):
        try:
            return await with_retry(
                operation,
                max_retries=self._pipeline.upsert_max_retries,
                initial_delay=self._pipeline.upsert_initial_delay_s,
                operation_name=operation_name,
                sleep=self._sleep,
            )
        except VectorStoreError:
            raise
        except Exception as e:
            raise VectorStoreError(
                f"Vector store {operation_name} failed: {e}",
                operation=operation_name,
            ) from e
