"""
Conversation request schemas.

Turn and request models for the streaming conversation endpoint, with the
limits enforced on every request.

Dependencies: pydantic
System role: Conversation input validation
"""

from enum import Enum

from pydantic import BaseModel, Field, field_validator

MAX_CONVERSATION_TURNS = 30
MAX_TURN_CHARS = 10000


class TurnRole(str, Enum):
    """Author of a conversation turn."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ConversationTurn(BaseModel):
    """
    Single conversation message.

    Attributes:
        role: user, assistant or system
        content: Message text
    """

    role: TurnRole
    content: str = Field(min_length=1, max_length=MAX_TURN_CHARS)

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Message content must not be blank")
        return value


class ConversationRequest(BaseModel):
    """
    Streaming conversation request body.

    Attributes:
        capture_id: Capture the conversation is about
        messages: Conversation so far, oldest first
        model: Optional model override
    """

    capture_id: str = Field(min_length=1)
    messages: list[ConversationTurn] = Field(min_length=1, max_length=MAX_CONVERSATION_TURNS)
    model: str | None = None


def latest_user_message(turns: list[ConversationTurn]) -> str:
    """Content of the most recent user turn, or an empty string."""
    for turn in reversed(turns):
        if turn.role == TurnRole.USER:
            return turn.content
    return ""


class UserContext(BaseModel):
    """
    Caller identity resolved by the API layer.

    Attributes:
        id: User ID used to scope vector search
        name: Display name used in the prompt
    """

    id: str = Field(min_length=1)
    name: str = ""
