"""
Dependency injection container.

Process-wide service handles built lazily and shared across requests, plus
the FastAPI dependency factories that expose them.

Dependencies: httpx, qdrant_client, sqlalchemy, linkmeld.application
System role: DI container for service injection
"""

import httpx
from fastapi import Header, HTTPException

from linkmeld.application.conversation_service import ConversationService
from linkmeld.application.document_summarizer import DocumentSummarizer
from linkmeld.application.ingestion_orchestrator import IngestionOrchestrator
from linkmeld.boundary.db.capture_repository import CaptureRepository
from linkmeld.boundary.db.connection import get_async_engine, get_async_session_factory
from linkmeld.boundary.embeddings.gemini_embedding_client import GeminiEmbeddingClient
from linkmeld.boundary.pdf.pdf_fetcher import PdfFetcher
from linkmeld.boundary.storage.s3_blob_storage import S3BlobStorage
from linkmeld.boundary.vdb.client import build_qdrant_client
from linkmeld.boundary.vdb.vector_index_gateway import VectorIndexGateway
from linkmeld.configs import get_settings
from linkmeld.core.rag.conversation_streamer import ConversationStreamer
from linkmeld.models.conversation import UserContext


class ServiceCache:
    """Container for cached service instances."""

    def __init__(self) -> None:
        self._http_client = None
        self._qdrant_client = None
        self._engine = None
        self._capture_store = None
        self._gateway = None
        self._conversation_service = None
        self._orchestrator = None

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Get shared HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient()
        return self._http_client

    @property
    def qdrant_client(self):
        """Get shared Qdrant client."""
        if self._qdrant_client is None:
            self._qdrant_client = build_qdrant_client(get_settings().vector_store)
        return self._qdrant_client

    @property
    def capture_store(self) -> CaptureRepository:
        """Get capture repository."""
        if self._capture_store is None:
            self._engine = get_async_engine(get_settings().database)
            self._capture_store = CaptureRepository(get_async_session_factory(self._engine))
        return self._capture_store

    @property
    def gateway(self) -> VectorIndexGateway:
        """Get vector index gateway."""
        if self._gateway is None:
            settings = get_settings()
            embedder = GeminiEmbeddingClient(
                self.http_client,
                settings=settings.gemini,
                vector_size=settings.vector_store.vector_size,
            )
            self._gateway = VectorIndexGateway(
                self.qdrant_client,
                embedder,
                settings.vector_store,
                settings.pipeline,
            )
        return self._gateway

    @property
    def conversation_service(self) -> ConversationService:
        """Get conversation service."""
        if self._conversation_service is None:
            settings = get_settings()
            streamer = ConversationStreamer(
                self.gateway,
                gemini_settings=settings.gemini,
                pipeline_settings=settings.pipeline,
            )
            self._conversation_service = ConversationService(self.capture_store, streamer)
        return self._conversation_service

    @property
    def orchestrator(self) -> IngestionOrchestrator:
        """Get ingestion orchestrator (used for re-process and delete)."""
        if self._orchestrator is None:
            from linkmeld.workers import celery_app
            from linkmeld.workers.job_queue import CeleryJobQueue

            settings = get_settings()
            self._orchestrator = IngestionOrchestrator(
                store=self.capture_store,
                queue=CeleryJobQueue(celery_app, settings.celery),
                gateway=self.gateway,
                summarizer=DocumentSummarizer(
                    gemini_settings=settings.gemini,
                    pipeline_settings=settings.pipeline,
                ),
                pdf_fetcher=PdfFetcher(self.http_client, settings.pipeline),
                blob_storage=S3BlobStorage(settings.blob_storage),
                settings=settings.pipeline,
            )
        return self._orchestrator

    async def aclose(self) -> None:
        """Close network clients and clear all cached instances."""
        if self._http_client is not None:
            await self._http_client.aclose()
        if self._qdrant_client is not None:
            await self._qdrant_client.close()
        if self._engine is not None:
            await self._engine.dispose()
        self._http_client = None
        self._qdrant_client = None
        self._engine = None
        self._capture_store = None
        self._gateway = None
        self._conversation_service = None
        self._orchestrator = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


def get_conversation_service() -> ConversationService:
    """Get conversation service instance."""
    return _service_cache.conversation_service


def get_orchestrator() -> IngestionOrchestrator:
    """Get ingestion orchestrator instance."""
    return _service_cache.orchestrator


def get_current_user(
    x_user_id: str | None = Header(default=None),
    x_user_name: str = Header(default=""),
) -> UserContext:
    """
    Resolve the caller from gateway-provided headers.

    Raises:
        HTTPException(401): X-User-Id missing
    """
    if not x_user_id:
        raise HTTPException(
            status_code=401,
            detail={"code": "UNAUTHORIZED", "message": "X-User-Id header is required"},
        )
    return UserContext(id=x_user_id, name=x_user_name)


def get_api_key(x_gemini_api_key: str | None = Header(default=None)) -> str | None:
    """User's Gemini API key, if supplied."""
    return x_gemini_api_key or None
