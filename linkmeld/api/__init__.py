"""HTTP API: conversation streaming and capture lifecycle endpoints."""
