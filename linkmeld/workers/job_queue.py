"""
Celery-backed job queue.

Publishes ingestion jobs to the queue matching their kind. Publishing is a
blocking broker call and runs in a worker thread.

Dependencies: celery, linkmeld.models.jobs
System role: JobQueue implementation for the orchestrator
"""

import asyncio
import logging

from celery import Celery

from linkmeld.configs.celery_config import CelerySettings
from linkmeld.models.jobs import EmbedJob, PdfFetchJob, SummarizeJob
from linkmeld.workers import EMBED_TASK, PROCESS_PDF_TASK, SUMMARIZE_TASK

logger = logging.getLogger(__name__)


class CeleryJobQueue:
    """Send jobs to the pdf, ai and embed queues."""

    def __init__(self, app: Celery, settings: CelerySettings | None = None) -> None:
        self._app = app
        self._settings = settings or CelerySettings()

    def route(self, job: SummarizeJob | EmbedJob | PdfFetchJob) -> tuple[str, str]:
        """
        Resolve (task name, queue) for a job.

        Raises:
            TypeError: Unknown job type
        """
        match job:
            case PdfFetchJob():
                return PROCESS_PDF_TASK, self._settings.pdf_queue
            case SummarizeJob():
                return SUMMARIZE_TASK, self._settings.ai_queue
            case EmbedJob():
                return EMBED_TASK, self._settings.embed_queue
            case _:
                raise TypeError(f"Unsupported job: {type(job).__name__}")

    async def enqueue(self, job: SummarizeJob | EmbedJob | PdfFetchJob) -> None:
        """Publish a job."""
        task_name, queue = self.route(job)
        payload = job.model_dump(mode="json", exclude={"attempt"})
        await asyncio.to_thread(
            self._app.send_task,
            task_name,
            kwargs={"payload": payload},
            queue=queue,
        )
        logger.info(
            f"{__name__}:enqueue - Queued {job.kind} on {queue}",
            extra={"document_id": job.document_id},
        )
