"""LinkMeld capture RAG backend."""
