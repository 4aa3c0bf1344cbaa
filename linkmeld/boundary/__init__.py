"""Boundary layer: adapters for external services (Gemini, Qdrant, Postgres, S3, HTTP)."""
