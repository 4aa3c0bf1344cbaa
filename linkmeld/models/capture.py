"""
Capture record schemas.

The subset of a capture that the ingestion pipeline reads and writes,
plus the processing status lifecycle.

Dependencies: pydantic
System role: Document store data transfer objects
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ProcessingStatus(str, Enum):
    """
    Capture processing lifecycle.

    PENDING: captured, nothing started
    PROCESSING: a pipeline stage is running
    READY: PDF downloaded and extracted, AI stage queued
    COMPLETE: summary written
    ERROR: a stage failed; processing_status_message has details
    """

    PENDING = "pending"
    PROCESSING = "processing"
    READY = "ready"
    COMPLETE = "complete"
    ERROR = "error"


class CaptureRecord(BaseModel):
    """Capture as seen by the pipeline."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    title: str | None = None
    source_url: str | None = None
    is_pdf: bool = False
    content_clean: str | None = None
    ai_summary: str | None = None
    processing_status: ProcessingStatus = ProcessingStatus.PENDING
    processing_status_message: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class PdfExtractionResult(BaseModel):
    """
    Fields written once a PDF has been downloaded and extracted.

    Attributes:
        title: Title derived from the PDF metadata or URL
        slug: URL-friendly title
        blob_key: Object key of the uploaded PDF
        content_clean: Whitespace-collapsed extracted text
        content_hash: sha256 of the normalized text
        word_count: Number of words in content_clean
        reading_time_minutes: Estimated reading time
        captured_at: Start of the PDF stage
    """

    title: str
    slug: str
    blob_key: str
    content_clean: str
    content_hash: str
    word_count: int
    reading_time_minutes: int
    captured_at: datetime

    def metadata(self) -> dict[str, Any]:
        """Metadata block stored on the capture."""
        return {
            "type": "document",
            "is_pdf": True,
            "word_count": self.word_count,
            "reading_time_minutes": self.reading_time_minutes,
            "captured_at": self.captured_at.isoformat(),
        }
