"""Conversation API endpoint.

Routes:
- POST /conversations/stream - Stream a grounded answer using Server-Sent Events (SSE)

Dependencies: linkmeld.application.conversation_service
System role: Conversation streaming HTTP API
"""

import asyncio
import logging
from collections.abc import AsyncGenerator
from typing import Any

import pydantic
from fastapi import APIRouter, Body, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse

from linkmeld.api.deps import get_api_key, get_conversation_service, get_current_user
from linkmeld.application.conversation_service import ConversationService
from linkmeld.core.exceptions import CaptureNotFoundError
from linkmeld.models.conversation import ConversationRequest, UserContext

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/conversations", tags=["conversations"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",  # Disable nginx buffering
}


def _validation_message(error: pydantic.ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg', 'invalid value')}" if location else first.get("msg", "")


@router.post("/stream")
async def stream_conversation(
    request: Request,
    body: Any = Body(default=None),
    user: UserContext = Depends(get_current_user),
    api_key: str | None = Depends(get_api_key),
    conversation_service: ConversationService = Depends(get_conversation_service),
) -> StreamingResponse:
    """Stream an answer about a capture using Server-Sent Events (SSE).

    SSE Format:
        data: {"text": "..."}                          (zero or more)
        data: {"done": true}                           (success)
        data: {"error": "...", "code": "..."}          (failure)

    Args:
        request: Incoming request, polled for client disconnect
        body: Raw ConversationRequest JSON
        user: Caller resolved from headers
        api_key: User's Gemini API key
        conversation_service: Injected ConversationService

    Returns:
        StreamingResponse: SSE stream of conversation events

    Raises:
        HTTPException(400): INVALID_REQUEST or API_KEY_REQUIRED
        HTTPException(404): CAPTURE_NOT_FOUND
    """
    try:
        conversation = ConversationRequest.model_validate(body)
    except pydantic.ValidationError as e:
        raise HTTPException(
            status_code=400,
            detail={"code": "INVALID_REQUEST", "message": _validation_message(e)},
        )

    if not api_key:
        raise HTTPException(
            status_code=400,
            detail={"code": "API_KEY_REQUIRED", "message": "API key is required for AI operations"},
        )

    try:
        capture = await conversation_service.load_capture(conversation.capture_id, user.id)
    except CaptureNotFoundError as e:
        raise HTTPException(
            status_code=404,
            detail={"code": "CAPTURE_NOT_FOUND", "message": e.message},
        )

    logger.info(f"{__name__}:stream_conversation - START capture_id={capture.id}")
    cancel_event = asyncio.Event()

    async def event_generator() -> AsyncGenerator[str, None]:
        """Generate SSE frames, flagging cancellation once the client is gone."""
        async for event in conversation_service.stream(
            user=user,
            api_key=api_key,
            capture=capture,
            request=conversation,
            cancel_event=cancel_event,
        ):
            yield event.to_sse()
            if not event.is_terminal and await request.is_disconnected():
                logger.info(f"{__name__}:stream_conversation - Client disconnected")
                cancel_event.set()

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
