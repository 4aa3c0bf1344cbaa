"""Pydantic models shared by the API, orchestrator and workers."""
