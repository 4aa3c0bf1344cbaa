"""
Ingestion job orchestrator.

One job kind = one state-transition script over a capture:

    PdfFetch  -> processing -> ready -> enqueue Summarize + Embed(INDEX)
    Summarize -> processing -> complete | error
    Embed(INDEX)  -> vector index populated (no status change)
    Embed(DELETE) -> vector index teardown (never fails the caller)

A failed PdfFetch or Summarize keeps the capture in processing while Celery
still has attempts left; the last attempt or a permanent error marks it error.

Jobs arrive from the queue workers; re-process and delete requests arrive
from the API. Collaborators are injected so each stage can be exercised
against fakes.

Known race: Embed(INDEX) and Embed(DELETE) for the same capture are not
ordered against each other; whichever reaches Qdrant last wins.

Dependencies: linkmeld.boundary, linkmeld.core, linkmeld.models
System role: Per-capture background processing state machine
"""

import asyncio
import logging
from datetime import datetime, timezone

from linkmeld.application.document_summarizer import DocumentSummarizer
from linkmeld.application.ports import ApiKeyResolver, BlobStorage, DocumentStore, JobQueue
from linkmeld.boundary.pdf.pdf_fetcher import PdfFetcher
from linkmeld.boundary.vdb.vector_index_gateway import VectorIndexGateway
from linkmeld.configs.pipeline import PipelineSettings
from linkmeld.core.exceptions import (
    CaptureNotFoundError,
    LinkMeldException,
    MissingApiKeyError,
    PdfFetchError,
)
from linkmeld.core.text_utils import (
    collapse_whitespace,
    content_hash,
    count_words,
    reading_time_minutes,
    remove_boilerplate,
    slugify,
)
from linkmeld.models.capture import PdfExtractionResult, ProcessingStatus
from linkmeld.models.jobs import EmbeddingTaskKind, EmbedJob, PdfFetchJob, SummarizeJob
from linkmeld.observability.log_utils import log_exception_with_context, log_with_context

logger = logging.getLogger(__name__)

SUMMARY_COMPLETE_MESSAGE = "AI summarization complete"
SUMMARY_SKIPPED_MESSAGE = "Content too short for AI summary"

# Failures no retry can fix; the status goes to error on the first attempt
PERMANENT_ERRORS = (CaptureNotFoundError, PdfFetchError, MissingApiKeyError)


def _error_message(exc: BaseException) -> str:
    if isinstance(exc, LinkMeldException):
        return exc.message
    return str(exc) or type(exc).__name__


async def _no_api_key(user_id: str) -> str | None:
    return None


class IngestionOrchestrator:
    """Drives captures through PDF fetch, summarization and indexing."""

    def __init__(
        self,
        store: DocumentStore,
        queue: JobQueue,
        gateway: VectorIndexGateway,
        summarizer: DocumentSummarizer,
        pdf_fetcher: PdfFetcher,
        blob_storage: BlobStorage,
        settings: PipelineSettings | None = None,
        api_key_resolver: ApiKeyResolver | None = None,
        max_attempts: int = 3,
    ) -> None:
        """
        Initialize orchestrator.

        Args:
            store: Capture document store
            queue: Queue used to schedule follow-up jobs
            gateway: Vector index gateway
            summarizer: Summary generator
            pdf_fetcher: Remote PDF download and extraction
            blob_storage: PDF blob storage
            settings: Content thresholds
            api_key_resolver: Looks up a user's Gemini key when a job carries none
            max_attempts: Delivery attempts per job, first run included
        """
        self._store = store
        self._queue = queue
        self._gateway = gateway
        self._summarizer = summarizer
        self._pdf_fetcher = pdf_fetcher
        self._blob_storage = blob_storage
        self._settings = settings or PipelineSettings()
        self._resolve_api_key = api_key_resolver or _no_api_key
        self._max_attempts = max_attempts

    async def handle(self, job: SummarizeJob | EmbedJob | PdfFetchJob) -> None:
        """
        Run one job.

        Raises:
            Exception: Stage failure, re-raised so the queue can retry
        """
        logger.info(
            f"{__name__}:handle - START {job.kind}",
            extra={"document_id": job.document_id, "attempt": job.attempt},
        )
        match job:
            case PdfFetchJob():
                await self._process_pdf(job)
            case SummarizeJob():
                await self._summarize(job)
            case EmbedJob(task_type=EmbeddingTaskKind.INDEX):
                await self._index(job)
            case EmbedJob(task_type=EmbeddingTaskKind.DELETE):
                await self._delete_index(job)
            case _:
                raise TypeError(f"Unsupported job: {type(job).__name__}")

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _process_pdf(self, job: PdfFetchJob) -> None:
        captured_at = datetime.now(timezone.utc)
        await self._store.set_status(
            job.document_id,
            ProcessingStatus.PROCESSING,
            "Fetching PDF",
            metadata={"captured_at": captured_at.isoformat()},
        )

        try:
            await self._pdf_fetcher.check_remote_pdf(job.url)
            pdf = await self._pdf_fetcher.download(job.url)

            blob_key, raw_text = await asyncio.gather(
                self._blob_storage.upload_pdf(job.user_id, job.document_id, pdf.data),
                self._pdf_fetcher.extract_text(pdf.data),
            )

            clean_text = collapse_whitespace(raw_text)
            if len(clean_text) < self._settings.min_pdf_text_chars:
                logger.warning(
                    f"{__name__}:_process_pdf - Extracted text is short ({len(clean_text)} chars)",
                    extra={"document_id": job.document_id},
                )

            await self._store.save_pdf_result(
                job.document_id,
                PdfExtractionResult(
                    title=pdf.title,
                    slug=slugify(pdf.title),
                    blob_key=blob_key,
                    content_clean=clean_text,
                    content_hash=content_hash(clean_text),
                    word_count=count_words(clean_text),
                    reading_time_minutes=reading_time_minutes(clean_text),
                    captured_at=captured_at,
                ),
            )
        except Exception as e:
            await self._record_failure(job, e, "_process_pdf")
            raise

        follow_up = {"document_id": job.document_id, "user_id": job.user_id, "api_key": job.api_key}
        await self._queue.enqueue(SummarizeJob(**follow_up))
        await self._queue.enqueue(EmbedJob(task_type=EmbeddingTaskKind.INDEX, **follow_up))
        logger.info(
            f"{__name__}:_process_pdf - PDF ready, summarize and index queued",
            extra={"document_id": job.document_id},
        )

    async def _summarize(self, job: SummarizeJob) -> None:
        record = await self._store.get(job.document_id)
        if record is None:
            raise CaptureNotFoundError(job.document_id)

        text = (record.content_clean or "").strip()
        if len(text) < self._settings.min_summary_input_chars:
            logger.warning(
                f"{__name__}:_summarize - Content too short ({len(text)} chars), skipping",
                extra={"document_id": job.document_id},
            )
            if record.processing_status == ProcessingStatus.PROCESSING:
                await self._store.set_status(
                    job.document_id,
                    ProcessingStatus.PENDING,
                    SUMMARY_SKIPPED_MESSAGE,
                )
            return

        await self._store.set_status(
            job.document_id,
            ProcessingStatus.PROCESSING,
            "AI summarization in progress",
        )
        try:
            api_key = job.api_key or await self._resolve_api_key(job.user_id)
            if not api_key:
                raise MissingApiKeyError("API key is required for AI operations", job.document_id)

            summary = await self._summarizer.summarize(
                remove_boilerplate(text),
                api_key,
                existing_summary=record.ai_summary or "",
            )
            await self._store.save_summary(job.document_id, summary, SUMMARY_COMPLETE_MESSAGE)
        except Exception as e:
            await self._record_failure(job, e, "_summarize")
            raise

    async def _index(self, job: EmbedJob) -> None:
        record = await self._store.get(job.document_id)
        if record is None:
            raise CaptureNotFoundError(job.document_id)

        text = (record.content_clean or "").strip()
        if len(text) < self._settings.min_summary_input_chars:
            logger.warning(
                f"{__name__}:_index - Skipping embedding, content too short ({len(text)} chars)",
                extra={"document_id": job.document_id},
            )
            return

        api_key = job.api_key or await self._resolve_api_key(job.user_id)
        if not api_key:
            logger.warning(
                f"{__name__}:_index - No API key for user, skipping embedding",
                extra={"document_id": job.document_id, "user_id": job.user_id},
            )
            return

        indexed = await self._gateway.index_document(
            text=text,
            document_id=job.document_id,
            user_id=job.user_id,
            api_key=api_key,
        )
        logger.info(
            f"{__name__}:_index - Indexed {indexed} chunks",
            extra={"document_id": job.document_id},
        )

    async def _delete_index(self, job: EmbedJob) -> None:
        try:
            await self._gateway.delete_document(job.document_id, job.user_id)
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:_delete_index - Vector cleanup failed, continuing",
                e,
                document_id=job.document_id,
                user_id=job.user_id,
            )

    async def _record_failure(
        self,
        job: SummarizeJob | PdfFetchJob,
        exc: Exception,
        stage: str,
    ) -> None:
        """Mark the capture as errored once no retry is left, else keep it processing."""
        final = job.attempt >= self._max_attempts or isinstance(exc, PERMANENT_ERRORS)
        if final:
            log_exception_with_context(
                logger,
                f"{__name__}:{stage} - Stage failed",
                exc,
                document_id=job.document_id,
                attempt=job.attempt,
            )
            await self._store.set_status(job.document_id, ProcessingStatus.ERROR, _error_message(exc))
            return

        log_with_context(
            logger,
            logging.WARNING,
            f"{__name__}:{stage} - Attempt {job.attempt}/{self._max_attempts} failed, retrying",
            document_id=job.document_id,
            error=_error_message(exc),
        )
        await self._store.set_status(
            job.document_id,
            ProcessingStatus.PROCESSING,
            f"Retrying after attempt {job.attempt} failed",
        )

    # ------------------------------------------------------------------
    # API entry points
    # ------------------------------------------------------------------

    async def reprocess(self, document_id: str, user_id: str, api_key: str | None = None) -> str:
        """
        Restart processing for a capture.

        PDFs re-enter at the fetch stage, everything else at summarization.

        Args:
            document_id: Capture ID
            user_id: Owner ID
            api_key: Caller's Gemini key, forwarded to the job

        Returns:
            str: Kind of the job that was queued

        Raises:
            CaptureNotFoundError: Capture missing or owned by someone else
        """
        record = await self._store.get(document_id, user_id)
        if record is None:
            raise CaptureNotFoundError(document_id)

        await self._store.set_status(document_id, ProcessingStatus.PROCESSING, "Re-processing requested")

        if record.is_pdf and record.source_url:
            job = PdfFetchJob(
                document_id=document_id,
                user_id=user_id,
                api_key=api_key,
                url=record.source_url,
            )
        else:
            job = SummarizeJob(document_id=document_id, user_id=user_id, api_key=api_key)
        await self._queue.enqueue(job)

        logger.info(
            f"{__name__}:reprocess - Queued {job.kind}",
            extra={"document_id": document_id},
        )
        return job.kind

    async def delete_capture(self, document_id: str, user_id: str) -> bool:
        """
        Delete a capture and schedule vector cleanup.

        Vector cleanup is best effort: failing to enqueue it never blocks
        deletion of the capture itself.

        Returns:
            bool: True if the capture was deleted
        """
        if await self._store.get(document_id, user_id) is None:
            return False

        try:
            await self._queue.enqueue(
                EmbedJob(
                    document_id=document_id,
                    user_id=user_id,
                    task_type=EmbeddingTaskKind.DELETE,
                )
            )
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:delete_capture - Failed to queue vector cleanup",
                e,
                document_id=document_id,
            )

        deleted = await self._store.delete(document_id, user_id)
        logger.info(
            f"{__name__}:delete_capture - deleted={deleted}",
            extra={"document_id": document_id},
        )
        return deleted
