"""
Conversation streamer.

Runs one grounded answer: retrieve chunks for the latest user turn, assemble
the prompt, then stream text segments from the Gemini chat model in arrival
order. The caller may cancel through an asyncio.Event; the model stream is
closed as soon as cancellation or the hard timeout is observed.

Dependencies: langchain_google_genai, langchain_core, linkmeld.boundary.vdb
System role: RAG answer streaming for the conversation endpoint
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable, Sequence
from typing import Any

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from linkmeld.boundary.vdb.vector_index_gateway import VectorIndexGateway
from linkmeld.configs.gemini import GeminiSettings
from linkmeld.configs.pipeline import PipelineSettings
from linkmeld.core.exceptions import ConversationTimeoutError, StreamCancelledError
from linkmeld.core.rag.context_assembler import build_prompt, join_retrieved_texts
from linkmeld.models.conversation import ConversationTurn, UserContext, latest_user_message

logger = logging.getLogger(__name__)

ChatModelFactory = Callable[[str, str], BaseChatModel]


def gemini_chat_model_factory(settings: GeminiSettings | None = None) -> ChatModelFactory:
    """
    Build a factory creating per-request Gemini chat models.

    The API key belongs to the user, so a model instance is created per call.
    """
    s = settings or GeminiSettings()

    def factory(api_key: str, model: str) -> BaseChatModel:
        return ChatGoogleGenerativeAI(
            model=model,
            google_api_key=api_key,
            temperature=s.temperature,
            top_p=s.top_p,
            max_output_tokens=s.max_output_tokens,
        )

    return factory


def chunk_to_text(content: Any) -> str:
    """Extract text from a streamed message chunk's content (str or parts list)."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "".join(
            item if isinstance(item, str) else (item.get("text", "") if isinstance(item, dict) else "")
            for item in content
        )
    return str(content) if content else ""


class ConversationStreamer:
    """Retrieval, prompt assembly and model streaming for one conversation turn."""

    def __init__(
        self,
        gateway: VectorIndexGateway,
        chat_model_factory: ChatModelFactory | None = None,
        gemini_settings: GeminiSettings | None = None,
        pipeline_settings: PipelineSettings | None = None,
    ) -> None:
        """
        Initialize streamer.

        Args:
            gateway: Vector index gateway used for retrieval
            chat_model_factory: Builds a chat model from (api_key, model name)
            gemini_settings: Default model and generation parameters
            pipeline_settings: Window sizes, caps and timeout
        """
        self._gateway = gateway
        self._gemini = gemini_settings or GeminiSettings()
        self._pipeline = pipeline_settings or PipelineSettings()
        self._chat_model_factory = chat_model_factory or gemini_chat_model_factory(self._gemini)

    async def stream_answer(
        self,
        user: UserContext,
        api_key: str,
        document_summary: str | None,
        document_id: str,
        conversation_turns: Sequence[ConversationTurn],
        model: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> AsyncIterator[str]:
        """
        Stream answer segments for the latest user turn.

        Args:
            user: Caller identity
            api_key: User's Gemini API key
            document_summary: Stored summary of the capture
            document_id: Capture ID used to scope retrieval
            conversation_turns: Conversation so far, oldest first
            model: Chat model override
            cancel_event: Set by the caller to stop the stream

        Yields:
            str: Non-empty text segments in arrival order

        Raises:
            QueryEmbeddingError: Query could not be embedded
            VectorStoreError: Retrieval failed
            StreamCancelledError: cancel_event was set
            ConversationTimeoutError: Model exceeded the hard timeout
        """
        turns = list(conversation_turns)
        query = latest_user_message(turns).strip()[: self._pipeline.max_query_chars]
        model_name = model or self._gemini.chat_model

        # Step 1: retrieval
        logger.info(
            f"{__name__}:stream_answer - Step 1: Retrieving context",
            extra={"document_id": document_id, "query_len": len(query)},
        )
        matches = await self._gateway.search(
            query=query,
            user_id=user.id,
            document_id=document_id,
            api_key=api_key,
        )
        retrieved_context = join_retrieved_texts([match.text for match in matches])
        if not matches:
            logger.warning(f"{__name__}:stream_answer - No chunks retrieved, using fallback context")

        # Step 2: prompt
        prompt = build_prompt(
            user.name,
            document_summary,
            turns,
            retrieved_context,
            summary_chars=self._pipeline.summary_prompt_chars,
            window=self._pipeline.conversation_window,
        )
        logger.info(
            f"{__name__}:stream_answer - Step 2 OK: prompt_len={len(prompt)}, chunks={len(matches)}"
        )

        # Step 3: stream
        self._raise_if_cancelled(cancel_event)
        chat_model = self._chat_model_factory(api_key, model_name)
        stream = chat_model.astream([HumanMessage(content=prompt)])
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._pipeline.conversation_timeout_s
        segments = 0
        try:
            while True:
                self._raise_if_cancelled(cancel_event)
                remaining = deadline - loop.time()
                if remaining <= 0:
                    raise ConversationTimeoutError("Model response timed out")
                try:
                    chunk = await asyncio.wait_for(anext(stream), timeout=remaining)
                except StopAsyncIteration:
                    break
                except asyncio.TimeoutError as e:
                    raise ConversationTimeoutError("Model response timed out") from e

                self._raise_if_cancelled(cancel_event)
                text = chunk_to_text(chunk.content)
                if text:
                    segments += 1
                    yield text
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()
            logger.info(
                f"{__name__}:stream_answer - Stream closed after {segments} segments",
                extra={"document_id": document_id, "model": model_name},
            )

    @staticmethod
    def _raise_if_cancelled(cancel_event: asyncio.Event | None) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise StreamCancelledError("Conversation stream cancelled by client")
