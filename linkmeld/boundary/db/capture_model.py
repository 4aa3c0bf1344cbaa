"""
Capture ORM model.

Captured web pages and PDFs with their clean text, AI summary and
processing status.

Dependencies: sqlalchemy, linkmeld.boundary.db.base
System role: Capture persistence for the ingestion pipeline
"""

from typing import Any

from sqlalchemy import JSON, Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from linkmeld.boundary.db.base import Base, TimestampMixin, UUIDMixin
from linkmeld.models.capture import ProcessingStatus


class CaptureModel(Base, UUIDMixin, TimestampMixin):
    """
    Capture ORM model.

    Attributes:
        user_id: Owner ID
        title: Page or PDF title
        slug: URL-friendly title
        source_url: Original URL
        is_pdf: Whether the capture is a PDF fetched by the pipeline
        blob_key: S3 key of the stored PDF
        content_clean: Extracted clean text (read by summarize/embed jobs)
        content_hash: sha256 of the normalized clean text
        ai_summary: Generated summary
        processing_status: Lifecycle state
        processing_status_message: Human-readable detail for the current state
        capture_metadata: Free-form metadata (column name "metadata")
    """

    __tablename__ = "captures"

    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    title: Mapped[str | None] = mapped_column(String(512), nullable=True)
    slug: Mapped[str | None] = mapped_column(String(512), nullable=True)
    source_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    is_pdf: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    blob_key: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    content_clean: Mapped[str | None] = mapped_column(Text, nullable=True)
    content_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    ai_summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    processing_status: Mapped[str] = mapped_column(
        String(32),
        default=ProcessingStatus.PENDING.value,
        nullable=False,
    )
    processing_status_message: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    capture_metadata: Mapped[dict[str, Any]] = mapped_column(
        "metadata",
        JSON,
        default=dict,
        nullable=False,
    )
