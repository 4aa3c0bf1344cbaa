"""
Shared test fixtures and configuration for entire test suite.

Provides: fake Gemini embedding transport, in-memory Qdrant, SQLite-backed
capture repository, in-memory document store / job queue, scripted chat model
Dependencies: pytest, httpx, qdrant_client, sqlalchemy, langchain_core
System role: Test infrastructure and fixture management
"""

import asyncio
import json
import re
from typing import Any
from unittest.mock import AsyncMock

import httpx
import pytest
from langchain_core.messages import AIMessageChunk

from linkmeld.configs.gemini import GeminiSettings
from linkmeld.configs.pipeline import PipelineSettings
from linkmeld.configs.vector_store import VectorStoreSettings
from linkmeld.models.capture import CaptureRecord, ProcessingStatus

# Each embedding dimension counts one vocabulary word, so similarity is predictable
EMBEDDING_VOCABULARY = ("fox", "dog", "river", "market", "bridge", "cloud", "apple", "train")
VECTOR_SIZE = len(EMBEDDING_VOCABULARY)
_WORD = re.compile(r"[a-z]+")


def fake_embedding(text: str) -> list[float]:
    """Bag-of-words vector over EMBEDDING_VOCABULARY with a small floor."""
    words = _WORD.findall(text.lower())
    return [words.count(term) + 0.01 for term in EMBEDDING_VOCABULARY]


def embedding_handler(request: httpx.Request) -> httpx.Response:
    """MockTransport handler emulating the embedContent endpoint."""
    body = json.loads(request.content)
    text = body["content"]["parts"][0]["text"]
    return httpx.Response(200, json={"embedding": {"values": fake_embedding(text)}})


# ============================================================================
# Settings
# ============================================================================


@pytest.fixture
def pipeline_settings() -> PipelineSettings:
    """Pipeline settings with zero retry delays."""
    return PipelineSettings(
        embed_initial_delay_s=0,
        upsert_initial_delay_s=0,
        download_initial_delay_s=0,
        summary_initial_delay_s=0,
    )


@pytest.fixture
def vector_store_settings() -> VectorStoreSettings:
    """Small-dimension collection for the fake embeddings."""
    return VectorStoreSettings(collection_name="test_documents", vector_size=VECTOR_SIZE, top_k=5)


@pytest.fixture
def gemini_settings() -> GeminiSettings:
    """Gemini settings pointing at a test host."""
    return GeminiSettings(api_base="https://gemini.test/v1beta")


# ============================================================================
# Embeddings and vector store
# ============================================================================


@pytest.fixture
async def embedding_http_client():
    """httpx client answering embedContent requests with fake vectors."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(embedding_handler))
    yield client
    await client.aclose()


@pytest.fixture
def embedder(embedding_http_client, gemini_settings):
    """GeminiEmbeddingClient over the fake transport."""
    from linkmeld.boundary.embeddings.gemini_embedding_client import GeminiEmbeddingClient

    return GeminiEmbeddingClient(
        embedding_http_client,
        settings=gemini_settings,
        vector_size=VECTOR_SIZE,
        sleep=AsyncMock(),
    )


@pytest.fixture
async def qdrant_client():
    """In-memory AsyncQdrantClient."""
    from qdrant_client import AsyncQdrantClient

    client = AsyncQdrantClient(location=":memory:")
    yield client
    await client.close()


@pytest.fixture
def gateway(qdrant_client, embedder, vector_store_settings, pipeline_settings):
    """VectorIndexGateway over in-memory Qdrant and fake embeddings."""
    from linkmeld.boundary.vdb.vector_index_gateway import VectorIndexGateway

    return VectorIndexGateway(
        qdrant_client,
        embedder,
        vector_store_settings,
        pipeline_settings,
        sleep=AsyncMock(),
    )


# ============================================================================
# Database
# ============================================================================


@pytest.fixture
async def session_factory():
    """
    Create in-memory SQLite async database for testing.

    Yields:
        async_sessionmaker: Session factory bound to a fresh schema
    """
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
    from sqlalchemy.pool import StaticPool

    from linkmeld.boundary.db.base import Base

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def capture_repository(session_factory):
    """CaptureRepository backed by SQLite."""
    from linkmeld.boundary.db.capture_repository import CaptureRepository

    return CaptureRepository(session_factory)


# ============================================================================
# In-memory collaborators
# ============================================================================


class FakeStore:
    """In-memory DocumentStore recording every status transition."""

    def __init__(self, *records: CaptureRecord) -> None:
        self.records = {record.id: record for record in records}
        self.status_history: list[tuple[ProcessingStatus, str | None]] = []
        self.deleted: list[str] = []

    async def get(self, document_id: str, user_id: str | None = None) -> CaptureRecord | None:
        record = self.records.get(document_id)
        if record is None or (user_id is not None and record.user_id != user_id):
            return None
        return record.model_copy()

    async def set_status(self, document_id, status, message=None, metadata=None) -> None:
        record = self.records[document_id]
        self.status_history.append((status, message))
        record.processing_status = status
        record.processing_status_message = message
        if metadata:
            record.metadata = {**record.metadata, **metadata}

    async def save_summary(self, document_id, summary, message) -> None:
        record = self.records[document_id]
        self.status_history.append((ProcessingStatus.COMPLETE, message))
        record.ai_summary = summary
        record.processing_status = ProcessingStatus.COMPLETE
        record.processing_status_message = message

    async def save_pdf_result(self, document_id, result) -> None:
        record = self.records[document_id]
        self.status_history.append((ProcessingStatus.READY, "PDF processed, AI processing queued"))
        record.title = result.title
        record.content_clean = result.content_clean
        record.processing_status = ProcessingStatus.READY
        record.metadata = {**record.metadata, **result.metadata()}

    async def delete(self, document_id, user_id) -> bool:
        record = self.records.get(document_id)
        if record is None or record.user_id != user_id:
            return False
        del self.records[document_id]
        self.deleted.append(document_id)
        return True

    @property
    def statuses(self) -> list[ProcessingStatus]:
        return [status for status, _ in self.status_history]


class FakeQueue:
    """JobQueue collecting enqueued jobs."""

    def __init__(self, error: Exception | None = None) -> None:
        self.jobs: list[Any] = []
        self._error = error

    async def enqueue(self, job) -> None:
        if self._error is not None:
            raise self._error
        self.jobs.append(job)


class FakeChatModel:
    """
    Scripted streaming chat model.

    Records every prompt it receives and whether its stream was closed.
    """

    def __init__(
        self,
        segments: list[str],
        delay: float = 0.0,
        error: Exception | None = None,
    ) -> None:
        self.segments = segments
        self.delay = delay
        self.error = error
        self.prompts: list[str] = []
        self.closed = False

    async def astream(self, messages):
        self.prompts.append(messages[0].content)
        try:
            if self.error is not None:
                raise self.error
            for index, segment in enumerate(self.segments):
                if self.delay and index > 0:
                    await asyncio.sleep(self.delay)
                yield AIMessageChunk(content=segment)
        finally:
            self.closed = True


@pytest.fixture
def make_store():
    """Factory for FakeStore."""
    return FakeStore


@pytest.fixture
def make_queue():
    """Factory for FakeQueue."""
    return FakeQueue


@pytest.fixture
def make_chat_model():
    """Factory for FakeChatModel."""
    return FakeChatModel


@pytest.fixture
def sample_capture() -> CaptureRecord:
    """Web capture with enough text to summarize and embed."""
    return CaptureRecord(
        id="7b0a4c4e-1c1f-4a57-9d0e-5f1b2a3c4d5e",
        user_id="user-1",
        title="Foxes",
        source_url="https://example.com/foxes",
        content_clean=(
            "The quick brown fox jumps over the lazy dog. Foxes are small omnivores. "
            "They live in forests, grasslands and cities."
        ),
        processing_status=ProcessingStatus.PENDING,
    )
