"""
Exception hierarchy for the LinkMeld capture backend.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class LinkMeldException(Exception):
    """Base exception for all LinkMeld application errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class CaptureNotFoundError(LinkMeldException):
    """Raised when a capture record cannot be found."""

    def __init__(self, capture_id: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize capture not found error.

        Args:
            capture_id: ID of the missing capture
            details: Additional context
        """
        details = details or {}
        details["capture_id"] = capture_id
        super().__init__(f"Capture not found: {capture_id}", details)


class DocumentProcessingError(LinkMeldException):
    """Base exception for document processing errors."""

    def __init__(
        self,
        message: str,
        document_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize document processing error.

        Args:
            message: Error message
            document_id: ID of the document that failed
            details: Additional context
        """
        details = details or {}
        if document_id:
            details["document_id"] = document_id
        super().__init__(message, details)


class PdfFetchError(DocumentProcessingError):
    """Raised when a remote PDF fails the pre-check or cannot be downloaded."""

    def __init__(
        self,
        message: str,
        document_id: str | None = None,
        url: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize PDF fetch error.

        Args:
            message: Error message
            document_id: ID of the document
            url: Remote PDF URL
            details: Additional context
        """
        details = details or {}
        if url:
            details["url"] = url
        super().__init__(message, document_id, details)


class SummarizationError(DocumentProcessingError):
    """Raised when summary generation fails or returns an unusable result."""

    pass


class MissingApiKeyError(SummarizationError):
    """Raised when neither the job nor the user profile provides a Gemini key."""

    pass


class QueryEmbeddingError(LinkMeldException):
    """Raised when a retrieval query cannot be embedded."""

    pass


class VectorStoreError(LinkMeldException):
    """Raised when vector store operations fail."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize vector store error.

        Args:
            message: Error message
            operation: Operation that failed (ensure, upsert, delete, search)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class ConversationError(LinkMeldException):
    """Base exception for conversation streaming failures with a stable code."""

    code = "AI_CONVERSATION_FAILED"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize conversation error.

        Args:
            message: Error message
            code: Stable error code sent to the client
            details: Additional context
        """
        if code:
            self.code = code
        super().__init__(message, details)


class StreamCancelledError(ConversationError):
    """Raised when the caller cancels an in-flight answer stream."""

    code = "STREAM_CANCELLED"


class ConversationTimeoutError(ConversationError):
    """Raised when the generative model exceeds the hard timeout."""

    code = "REQUEST_TIMEOUT"
