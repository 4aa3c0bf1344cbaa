"""
Sentence-packing text chunker.

Splits clean document text on sentence boundaries (". ! ?" followed by
whitespace) and greedily packs consecutive sentences into chunks of at most
max_length characters. A sentence longer than max_length is emitted alone
rather than split.

Dependencies: pydantic
System role: Turns a capture's clean text into ordered embedding units
"""

import re

from pydantic import BaseModel, Field

SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")
DEFAULT_MAX_LENGTH = 500


class TextChunk(BaseModel):
    """
    Ordered slice of a document's text.

    Attributes:
        sequence_index: Position of the chunk in document order (0-based)
        text: Chunk content
    """

    sequence_index: int = Field(ge=0)
    text: str


def chunk_text(text: str, max_length: int = DEFAULT_MAX_LENGTH) -> list[str]:
    """
    Split text into sentence-aligned chunks.

    Args:
        text: Clean document text
        max_length: Target maximum characters per chunk

    Returns:
        list[str]: Chunks in document order, empty for blank input

    Raises:
        ValueError: max_length is not positive
    """
    if max_length <= 0:
        raise ValueError("max_length must be positive")

    chunks: list[str] = []
    buffer = ""
    for sentence in SENTENCE_BOUNDARY.split(text):
        sentence = sentence.strip()
        if not sentence:
            continue

        separator = 1 if buffer else 0
        if buffer and len(buffer) + separator + len(sentence) > max_length:
            chunks.append(buffer)
            buffer = sentence
        else:
            buffer = f"{buffer} {sentence}" if buffer else sentence

    if buffer:
        chunks.append(buffer)
    return chunks


def split_into_chunks(text: str, max_length: int = DEFAULT_MAX_LENGTH) -> list[TextChunk]:
    """Chunk text and attach sequence indexes."""
    return [
        TextChunk(sequence_index=index, text=chunk)
        for index, chunk in enumerate(chunk_text(text, max_length))
    ]
