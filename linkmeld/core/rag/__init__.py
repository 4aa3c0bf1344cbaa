"""Retrieval-augmented conversation: prompt assembly and answer streaming."""
