"""
Conversation service.

Loads the capture, runs the conversation streamer and turns its output into
stream events. Every failure becomes a single terminal ERROR event with a
stable code, so the channel always closes with DONE or ERROR.

Dependencies: linkmeld.core.rag, linkmeld.application.ports
System role: Conversation use case behind the SSE endpoint
"""

import asyncio
import logging
from collections.abc import AsyncGenerator

from linkmeld.application.ports import DocumentStore
from linkmeld.core.exceptions import (
    CaptureNotFoundError,
    ConversationError,
    QueryEmbeddingError,
    VectorStoreError,
)
from linkmeld.core.rag.conversation_streamer import ConversationStreamer
from linkmeld.models.capture import CaptureRecord
from linkmeld.models.conversation import ConversationRequest, UserContext
from linkmeld.models.streaming import StreamEvent

logger = logging.getLogger(__name__)

RETRIEVAL_FAILED = "RETRIEVAL_FAILED"
AI_CONVERSATION_FAILED = "AI_CONVERSATION_FAILED"


class ConversationService:
    """Grounded conversation over one capture."""

    def __init__(self, store: DocumentStore, streamer: ConversationStreamer) -> None:
        self._store = store
        self._streamer = streamer

    async def load_capture(self, capture_id: str, user_id: str) -> CaptureRecord:
        """
        Fetch the capture the conversation is about.

        Raises:
            CaptureNotFoundError: Missing or owned by another user
        """
        record = await self._store.get(capture_id, user_id)
        if record is None:
            raise CaptureNotFoundError(capture_id)
        return record

    async def stream(
        self,
        user: UserContext,
        api_key: str,
        capture: CaptureRecord,
        request: ConversationRequest,
        cancel_event: asyncio.Event | None = None,
    ) -> AsyncGenerator[StreamEvent, None]:
        """
        Stream answer events.

        Yields:
            StreamEvent: TEXT events followed by one DONE or ERROR event
        """
        logger.info(
            f"{__name__}:stream - START capture_id={capture.id} turns={len(request.messages)}"
        )
        segments = 0
        try:
            async for segment in self._streamer.stream_answer(
                user=user,
                api_key=api_key,
                document_summary=capture.ai_summary,
                document_id=capture.id,
                conversation_turns=request.messages,
                model=request.model,
                cancel_event=cancel_event,
            ):
                segments += 1
                yield StreamEvent.text(segment)
        except ConversationError as e:
            logger.warning(f"{__name__}:stream - {e.code}: {e.message}")
            yield StreamEvent.error(e.code, e.message)
            return
        except (QueryEmbeddingError, VectorStoreError) as e:
            logger.error(f"{__name__}:stream - Retrieval failed: {e}")
            yield StreamEvent.error(RETRIEVAL_FAILED, e.message)
            return
        except Exception as e:
            logger.error(f"{__name__}:stream - {type(e).__name__}: {e}")
            yield StreamEvent.error(AI_CONVERSATION_FAILED, "AI conversation failed")
            return

        logger.info(f"{__name__}:stream - Completed with {segments} segments")
        yield StreamEvent.done()
