"""
Collaborator protocols for the ingestion orchestrator.

Dependencies: typing
System role: Seams between orchestration and infrastructure adapters
"""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from linkmeld.models.capture import CaptureRecord, PdfExtractionResult, ProcessingStatus
from linkmeld.models.jobs import EmbedJob, PdfFetchJob, SummarizeJob

ApiKeyResolver = Callable[[str], Awaitable[str | None]]


class DocumentStore(Protocol):
    """Capture fields read and written by the pipeline."""

    async def get(self, document_id: str, user_id: str | None = None) -> CaptureRecord | None: ...

    async def set_status(
        self,
        document_id: str,
        status: ProcessingStatus,
        message: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None: ...

    async def save_summary(self, document_id: str, summary: str, message: str) -> None: ...

    async def save_pdf_result(self, document_id: str, result: PdfExtractionResult) -> None: ...

    async def delete(self, document_id: str, user_id: str) -> bool: ...


class JobQueue(Protocol):
    """At-least-once job queue."""

    async def enqueue(self, job: SummarizeJob | EmbedJob | PdfFetchJob) -> None: ...


class BlobStorage(Protocol):
    async def upload_pdf(self, user_id: str, document_id: str, data: bytes) -> str: ...
