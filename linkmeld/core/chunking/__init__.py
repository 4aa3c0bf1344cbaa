"""Text chunking for embedding."""

from linkmeld.core.chunking.text_chunker import TextChunk, chunk_text, split_into_chunks

__all__ = ["TextChunk", "chunk_text", "split_into_chunks"]
