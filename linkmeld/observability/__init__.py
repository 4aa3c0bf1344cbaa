"""
Observability module.

Logging configuration and structured logging helpers.
"""

from linkmeld.observability.logger import configure_logging

__all__ = ["configure_logging"]
