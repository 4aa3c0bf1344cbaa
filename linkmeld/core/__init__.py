"""Core domain logic: retry policy, chunking, RAG prompt assembly and streaming."""
