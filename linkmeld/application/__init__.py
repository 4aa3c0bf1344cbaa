"""Application layer: ingestion orchestration and conversation service."""
