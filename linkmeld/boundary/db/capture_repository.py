"""
Capture repository.

Reads and writes the capture fields owned by the ingestion pipeline:
clean content, AI summary, processing status/message and PDF metadata.
Each call runs in its own session and commits or rolls back before
returning, so one repository instance can be shared by a worker process.

Dependencies: sqlalchemy
System role: Document store implementation backed by PostgreSQL
"""

import logging
import uuid
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from linkmeld.boundary.db.capture_model import CaptureModel
from linkmeld.core.exceptions import CaptureNotFoundError
from linkmeld.models.capture import CaptureRecord, PdfExtractionResult, ProcessingStatus

logger = logging.getLogger(__name__)

MAX_STATUS_MESSAGE_CHARS = 2000


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


def _to_record(capture: CaptureModel) -> CaptureRecord:
    return CaptureRecord(
        id=str(capture.id),
        user_id=capture.user_id,
        title=capture.title,
        source_url=capture.source_url,
        is_pdf=capture.is_pdf,
        content_clean=capture.content_clean,
        ai_summary=capture.ai_summary,
        processing_status=ProcessingStatus(capture.processing_status),
        processing_status_message=capture.processing_status_message,
        metadata=dict(capture.capture_metadata or {}),
    )


class CaptureRepository:
    """Capture persistence for the pipeline."""

    def __init__(self, session_factory: async_sessionmaker) -> None:
        """
        Initialize with session factory.

        Args:
            session_factory: async_sessionmaker bound to the captures database
        """
        self._session_factory = session_factory

    async def _load(self, session: AsyncSession, document_id: str) -> CaptureModel:
        if not _is_uuid(document_id):
            raise CaptureNotFoundError(document_id)
        capture = await session.get(CaptureModel, document_id)
        if capture is None:
            raise CaptureNotFoundError(document_id)
        return capture

    async def get(self, document_id: str, user_id: str | None = None) -> CaptureRecord | None:
        """
        Fetch a capture, optionally scoped to its owner.

        Args:
            document_id: Capture UUID
            user_id: Owner ID; captures of other users are treated as missing

        Returns:
            CaptureRecord | None: The capture or None when not found
        """
        if not _is_uuid(document_id):
            return None
        async with self._session_factory() as session:
            stmt = select(CaptureModel).where(CaptureModel.id == document_id)
            if user_id is not None:
                stmt = stmt.where(CaptureModel.user_id == user_id)
            result = await session.execute(stmt)
            capture = result.scalar_one_or_none()
            return _to_record(capture) if capture else None

    async def set_status(
        self,
        document_id: str,
        status: ProcessingStatus,
        message: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """
        Update processing status, optionally merging metadata.

        Args:
            document_id: Capture UUID
            status: New status
            message: Human-readable status message (truncated to 2000 chars)
            metadata: Keys merged into the capture metadata

        Raises:
            CaptureNotFoundError: Capture does not exist
        """
        async with self._session_factory() as session:
            try:
                capture = await self._load(session, document_id)
                capture.processing_status = status.value
                capture.processing_status_message = (
                    message[:MAX_STATUS_MESSAGE_CHARS] if message else None
                )
                if metadata:
                    capture.capture_metadata = {**(capture.capture_metadata or {}), **metadata}
                await session.commit()
            except Exception as e:
                logger.error(f"{__name__}:set_status - {type(e).__name__}: {e}")
                await session.rollback()
                raise

        logger.info(
            f"{__name__}:set_status - Capture marked as {status.value}",
            extra={"document_id": document_id},
        )

    async def save_summary(self, document_id: str, summary: str, message: str) -> None:
        """
        Persist the AI summary and mark the capture complete.

        Args:
            document_id: Capture UUID
            summary: Generated summary
            message: Status message shown to the user
        """
        async with self._session_factory() as session:
            try:
                capture = await self._load(session, document_id)
                capture.ai_summary = summary
                capture.processing_status = ProcessingStatus.COMPLETE.value
                capture.processing_status_message = message
                await session.commit()
            except Exception as e:
                logger.error(f"{__name__}:save_summary - {type(e).__name__}: {e}")
                await session.rollback()
                raise

        logger.info(
            f"{__name__}:save_summary - Summary saved",
            extra={"document_id": document_id, "summary_len": len(summary)},
        )

    async def save_pdf_result(self, document_id: str, result: PdfExtractionResult) -> None:
        """
        Store extracted PDF content and mark the capture ready.

        Args:
            document_id: Capture UUID
            result: Extraction output
        """
        async with self._session_factory() as session:
            try:
                capture = await self._load(session, document_id)
                capture.title = result.title
                capture.slug = result.slug
                capture.blob_key = result.blob_key
                capture.content_clean = result.content_clean
                capture.content_hash = result.content_hash
                capture.capture_metadata = {**(capture.capture_metadata or {}), **result.metadata()}
                capture.processing_status = ProcessingStatus.READY.value
                capture.processing_status_message = "PDF processed, AI processing queued"
                await session.commit()
            except Exception as e:
                logger.error(f"{__name__}:save_pdf_result - {type(e).__name__}: {e}")
                await session.rollback()
                raise

        logger.info(
            f"{__name__}:save_pdf_result - PDF content stored",
            extra={"document_id": document_id, "word_count": result.word_count},
        )

    async def delete(self, document_id: str, user_id: str) -> bool:
        """
        Delete a capture owned by user_id.

        Returns:
            bool: True if a row was deleted
        """
        if not _is_uuid(document_id):
            return False
        async with self._session_factory() as session:
            try:
                result = await session.execute(
                    delete(CaptureModel).where(
                        CaptureModel.id == document_id,
                        CaptureModel.user_id == user_id,
                    )
                )
                await session.commit()
            except Exception as e:
                logger.error(f"{__name__}:delete - {type(e).__name__}: {e}")
                await session.rollback()
                raise
        return result.rowcount > 0
