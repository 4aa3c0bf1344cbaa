"""
Streaming event schemas for the conversation SSE channel.

Every stream ends with exactly one DONE or ERROR event.

Dependencies: pydantic
System role: Streaming protocol schemas
"""

import json
from enum import Enum
from typing import Any

from pydantic import BaseModel


class StreamEventType(str, Enum):
    """Server-to-client event types."""

    TEXT = "text"
    DONE = "done"
    ERROR = "error"


class StreamEvent(BaseModel):
    """
    Streaming event.

    Attributes:
        event: Event type identifier
        data: Event payload, serialized as the SSE data line
    """

    event: StreamEventType
    data: dict[str, Any]

    @classmethod
    def text(cls, segment: str) -> "StreamEvent":
        return cls(event=StreamEventType.TEXT, data={"text": segment})

    @classmethod
    def done(cls) -> "StreamEvent":
        return cls(event=StreamEventType.DONE, data={"done": True})

    @classmethod
    def error(cls, code: str, message: str) -> "StreamEvent":
        return cls(event=StreamEventType.ERROR, data={"error": message, "code": code})

    @property
    def is_terminal(self) -> bool:
        return self.event != StreamEventType.TEXT

    def to_sse(self) -> str:
        """Format as a Server-Sent Events frame."""
        return f"data: {json.dumps(self.data)}\n\n"
