"""
Ingestion Celery tasks.

One task per queue. Each validates its payload into a job and runs it
through the orchestrator; failures are retried by Celery with exponential
backoff (5s base) up to three attempts in total. Errors that a retry cannot
fix are excluded from autoretry.

Dependencies: celery, pydantic, linkmeld.workers.runtime
System role: Queue consumers for the ingestion pipeline
"""

import asyncio
import logging
from typing import Any

import pydantic

from linkmeld.application.ingestion_orchestrator import PERMANENT_ERRORS
from linkmeld.models.jobs import parse_job
from linkmeld.workers import (
    EMBED_TASK,
    PROCESS_PDF_TASK,
    SUMMARIZE_TASK,
    celery_app,
    celery_config,
)
from linkmeld.workers.runtime import orchestrator_scope

logger = logging.getLogger(__name__)

NON_RETRYABLE_ERRORS = (pydantic.ValidationError, *PERMANENT_ERRORS)

RETRY_POLICY: dict[str, Any] = {
    "bind": True,
    "autoretry_for": (Exception,),
    "dont_autoretry_for": NON_RETRYABLE_ERRORS,
    "max_retries": celery_config.task_max_retries,
    "retry_backoff": celery_config.task_retry_backoff,
    "retry_backoff_max": celery_config.task_retry_backoff_max,
    "retry_jitter": False,
}


async def _handle(payload: dict[str, Any]) -> None:
    job = parse_job(payload)
    async with orchestrator_scope() as orchestrator:
        await orchestrator.handle(job)


def run_job(payload: dict[str, Any], retries: int) -> dict[str, Any]:
    """
    Execute a job payload synchronously.

    Args:
        payload: Serialized job
        retries: Retries already performed by Celery

    Returns:
        dict: Summary of the processed job
    """
    attempt_payload = {**payload, "attempt": retries + 1}
    logger.info(
        f"{__name__}:run_job - START kind={payload.get('kind')} attempt={retries + 1}",
        extra={"document_id": payload.get("document_id")},
    )
    asyncio.run(_handle(attempt_payload))
    return {
        "document_id": payload.get("document_id"),
        "kind": payload.get("kind"),
        "attempt": retries + 1,
        "status": "done",
    }


@celery_app.task(name=PROCESS_PDF_TASK, **RETRY_POLICY)
def process_pdf(self, payload: dict[str, Any]) -> dict[str, Any]:
    """Download, extract and store a captured PDF, then queue AI and indexing."""
    return run_job(payload, self.request.retries)


@celery_app.task(name=SUMMARIZE_TASK, **RETRY_POLICY)
def summarize_capture(self, payload: dict[str, Any]) -> dict[str, Any]:
    """Generate and store the AI summary of a capture."""
    return run_job(payload, self.request.retries)


@celery_app.task(name=EMBED_TASK, **RETRY_POLICY)
def embed_capture(self, payload: dict[str, Any]) -> dict[str, Any]:
    """Index or delete a capture's chunks in the vector store."""
    return run_job(payload, self.request.retries)
