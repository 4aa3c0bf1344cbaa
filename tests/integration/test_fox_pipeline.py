"""
End-to-end pipeline test.

A capture stored in SQLite is indexed by the orchestrator into in-memory
Qdrant, then a conversation about it retrieves the fox chunk and streams a
scripted answer.

System role: Verification of ingestion through grounded answer streaming
"""

from unittest.mock import MagicMock

import pytest

from linkmeld.application.ingestion_orchestrator import IngestionOrchestrator
from linkmeld.boundary.db.capture_model import CaptureModel
from linkmeld.boundary.vdb.vector_index_gateway import document_filter
from linkmeld.configs.gemini import GeminiSettings
from linkmeld.core.rag.context_assembler import escape_markdown
from linkmeld.core.rag.conversation_streamer import ConversationStreamer
from linkmeld.models.conversation import ConversationTurn, TurnRole, UserContext
from linkmeld.models.jobs import EmbeddingTaskKind, EmbedJob

FOX_SENTENCE = "The quick brown fox jumps over the lazy dog near the old barn."
RIVER_SENTENCE = "The wide river flows past the quiet market town every single day."
DOCUMENT_TEXT = " ".join([FOX_SENTENCE] * 7 + [RIVER_SENTENCE] * 3)


@pytest.fixture
async def capture_id(session_factory) -> str:
    async with session_factory() as session:
        capture = CaptureModel(
            user_id="user-1",
            title="Fox and river",
            source_url="https://example.com/fox",
            content_clean=DOCUMENT_TEXT,
            ai_summary="A short piece about a fox and a river.",
        )
        session.add(capture)
        await session.commit()
        return capture.id


@pytest.fixture
def orchestrator(capture_repository, make_queue, gateway, pipeline_settings):
    return IngestionOrchestrator(
        store=capture_repository,
        queue=make_queue(),
        gateway=gateway,
        summarizer=MagicMock(),
        pdf_fetcher=MagicMock(),
        blob_storage=MagicMock(),
        settings=pipeline_settings,
    )


class TestFoxPipeline:
    """Index a capture, then ask about it."""

    @pytest.mark.asyncio
    async def test_indexed_capture_should_ground_the_answer(
        self,
        capture_id,
        capture_repository,
        orchestrator,
        gateway,
        qdrant_client,
        make_chat_model,
        pipeline_settings,
    ) -> None:
        # Index
        await orchestrator.handle(
            EmbedJob(
                document_id=capture_id,
                user_id="user-1",
                api_key="key-1",
                task_type=EmbeddingTaskKind.INDEX,
            )
        )
        count = await qdrant_client.count(
            collection_name=gateway.collection_name,
            count_filter=document_filter("user-1", capture_id),
            exact=True,
        )
        assert count.count == 2

        # Retrieve
        matches = await gateway.search("Tell me about the fox", "user-1", capture_id, "key-1")
        assert FOX_SENTENCE in matches[0].text

        # Answer
        chat_model = make_chat_model(["The fox ", "jumps over ", "the lazy dog."])
        streamer = ConversationStreamer(
            gateway,
            chat_model_factory=lambda api_key, model: chat_model,
            gemini_settings=GeminiSettings(chat_model="gemini-test"),
            pipeline_settings=pipeline_settings,
        )
        record = await capture_repository.get(capture_id, "user-1")

        segments = [
            segment
            async for segment in streamer.stream_answer(
                UserContext(id="user-1", name="Ada"),
                "key-1",
                record.ai_summary,
                capture_id,
                [ConversationTurn(role=TurnRole.USER, content="Tell me about the fox")],
            )
        ]

        assert "".join(segments) == "The fox jumps over the lazy dog."
        (prompt,) = chat_model.prompts
        assert escape_markdown(FOX_SENTENCE) in prompt
        assert "A short piece about a fox and a river\\." in prompt
        assert chat_model.closed

    @pytest.mark.asyncio
    async def test_deleted_capture_should_leave_no_points(
        self, capture_id, orchestrator, gateway, qdrant_client
    ) -> None:
        await orchestrator.handle(
            EmbedJob(document_id=capture_id, user_id="user-1", api_key="key-1")
        )
        await orchestrator.handle(
            EmbedJob(
                document_id=capture_id,
                user_id="user-1",
                task_type=EmbeddingTaskKind.DELETE,
            )
        )

        count = await qdrant_client.count(
            collection_name=gateway.collection_name,
            count_filter=document_filter("user-1", capture_id),
            exact=True,
        )
        assert count.count == 0
        assert await gateway.search("fox", "user-1", capture_id, "key-1") == []
