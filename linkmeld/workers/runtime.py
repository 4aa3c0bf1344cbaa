"""
Worker runtime wiring.

Each Celery task runs its job inside asyncio.run, so network clients and the
database engine are created per task and closed when it finishes.

Dependencies: httpx, qdrant_client, sqlalchemy, linkmeld.application
System role: Dependency wiring for background jobs
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx

from linkmeld.application.document_summarizer import DocumentSummarizer
from linkmeld.application.ingestion_orchestrator import IngestionOrchestrator
from linkmeld.application.ports import ApiKeyResolver
from linkmeld.boundary.db.capture_repository import CaptureRepository
from linkmeld.boundary.db.connection import get_async_engine, get_async_session_factory
from linkmeld.boundary.embeddings.gemini_embedding_client import GeminiEmbeddingClient
from linkmeld.boundary.pdf.pdf_fetcher import PdfFetcher
from linkmeld.boundary.storage.s3_blob_storage import S3BlobStorage
from linkmeld.boundary.vdb.client import build_qdrant_client
from linkmeld.boundary.vdb.vector_index_gateway import VectorIndexGateway
from linkmeld.configs import Settings, get_settings
from linkmeld.workers import celery_app
from linkmeld.workers.job_queue import CeleryJobQueue


def fallback_api_key_resolver(settings: Settings) -> ApiKeyResolver:
    """Resolver returning the configured fallback key for every user."""

    async def resolve(user_id: str) -> str | None:
        return settings.gemini.fallback_api_key

    return resolve


@asynccontextmanager
async def orchestrator_scope(settings: Settings | None = None) -> AsyncIterator[IngestionOrchestrator]:
    """
    Build an orchestrator with freshly opened clients.

    Yields:
        IngestionOrchestrator: Ready to handle one job
    """
    s = settings or get_settings()
    engine = get_async_engine(s.database)
    qdrant = build_qdrant_client(s.vector_store)
    try:
        async with httpx.AsyncClient() as http_client:
            embedder = GeminiEmbeddingClient(
                http_client,
                settings=s.gemini,
                vector_size=s.vector_store.vector_size,
            )
            yield IngestionOrchestrator(
                store=CaptureRepository(get_async_session_factory(engine)),
                queue=CeleryJobQueue(celery_app, s.celery),
                gateway=VectorIndexGateway(qdrant, embedder, s.vector_store, s.pipeline),
                summarizer=DocumentSummarizer(gemini_settings=s.gemini, pipeline_settings=s.pipeline),
                pdf_fetcher=PdfFetcher(http_client, s.pipeline),
                blob_storage=S3BlobStorage(s.blob_storage),
                settings=s.pipeline,
                api_key_resolver=fallback_api_key_resolver(s),
                max_attempts=s.celery.task_max_attempts,
            )
    finally:
        await qdrant.close()
        await engine.dispose()
