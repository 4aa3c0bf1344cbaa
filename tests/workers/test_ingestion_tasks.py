"""
Test suite for the ingestion Celery tasks.

Covers the retry policy, per-queue concurrency and job execution with the
orchestrator scope patched out.

System role: Verification of queue consumers
"""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pydantic
import pytest

from linkmeld.core.exceptions import CaptureNotFoundError, MissingApiKeyError, PdfFetchError
from linkmeld.models.jobs import EmbeddingTaskKind, EmbedJob, SummarizeJob
from linkmeld.workers import celery_app, worker_argv, worker_concurrency_for
from linkmeld.workers.tasks import ingestion_tasks
from linkmeld.workers.tasks.ingestion_tasks import (
    RETRY_POLICY,
    embed_capture,
    process_pdf,
    run_job,
    summarize_capture,
)


@pytest.fixture
def mock_orchestrator(monkeypatch) -> MagicMock:
    """Replace the orchestrator scope with one yielding a mock orchestrator."""
    orchestrator = MagicMock()
    orchestrator.handle = AsyncMock()

    @asynccontextmanager
    async def scope(settings=None):
        yield orchestrator

    monkeypatch.setattr(ingestion_tasks, "orchestrator_scope", scope)
    return orchestrator


# ============================================================================
# Retry policy and routing
# ============================================================================


class TestRetryPolicy:
    """Test suite for the shared task retry policy."""

    def test_policy_should_allow_three_attempts(self) -> None:
        assert RETRY_POLICY["max_retries"] == 2
        assert RETRY_POLICY["retry_backoff"] == 5
        assert RETRY_POLICY["retry_jitter"] is False
        assert RETRY_POLICY["autoretry_for"] == (Exception,)

    def test_permanent_errors_should_not_be_retried(self) -> None:
        for error_type in (
            pydantic.ValidationError,
            CaptureNotFoundError,
            MissingApiKeyError,
            PdfFetchError,
        ):
            assert error_type in RETRY_POLICY["dont_autoretry_for"]

    @pytest.mark.parametrize(
        "task, name",
        [
            (process_pdf, "linkmeld.process_pdf"),
            (summarize_capture, "linkmeld.summarize_capture"),
            (embed_capture, "linkmeld.embed_capture"),
        ],
    )
    def test_tasks_should_carry_policy(self, task, name) -> None:
        assert task.name == name
        assert task.max_retries == 2
        assert task.retry_backoff == 5

    def test_tasks_should_route_to_queues(self) -> None:
        routes = celery_app.conf.task_routes

        assert routes["linkmeld.process_pdf"] == {"queue": "pdf"}
        assert routes["linkmeld.summarize_capture"] == {"queue": "ai"}
        assert routes["linkmeld.embed_capture"] == {"queue": "embed"}


class TestWorkerConcurrency:
    """Test suite for per-queue worker concurrency."""

    @pytest.mark.parametrize("queue, expected", [("pdf", 5), ("ai", 3), ("embed", 2)])
    def test_concurrency_per_queue(self, queue: str, expected: int) -> None:
        assert worker_concurrency_for(queue) == expected

    def test_unknown_queue_should_raise(self) -> None:
        with pytest.raises(ValueError):
            worker_concurrency_for("video")

    def test_worker_argv_should_consume_single_queue(self) -> None:
        argv = worker_argv("ai")

        assert argv[0] == "worker"
        assert "--queues=ai" in argv
        assert "--concurrency=3" in argv


# ============================================================================
# Execution
# ============================================================================


class TestRunJob:
    """Test suite for run_job and the task bodies."""

    def test_run_job_should_handle_parsed_job(self, mock_orchestrator) -> None:
        """Test the payload is validated into its job class with the attempt number."""
        payload = {"kind": "embed", "document_id": "doc-1", "user_id": "user-1", "task_type": "delete"}

        result = run_job(payload, retries=1)

        (job,) = mock_orchestrator.handle.await_args.args
        assert isinstance(job, EmbedJob)
        assert job.task_type == EmbeddingTaskKind.DELETE
        assert job.attempt == 2
        assert result == {"document_id": "doc-1", "kind": "embed", "attempt": 2, "status": "done"}

    def test_invalid_payload_should_raise_validation_error(self, mock_orchestrator) -> None:
        with pytest.raises(pydantic.ValidationError):
            run_job({"kind": "transcode", "document_id": "doc-1", "user_id": "user-1"}, retries=0)

        mock_orchestrator.handle.assert_not_awaited()

    def test_orchestrator_error_should_propagate(self, mock_orchestrator) -> None:
        mock_orchestrator.handle.side_effect = RuntimeError("qdrant down")

        with pytest.raises(RuntimeError):
            run_job({"kind": "summarize", "document_id": "doc-1", "user_id": "user-1"}, retries=0)

    def test_task_call_should_run_first_attempt(self, mock_orchestrator) -> None:
        result = summarize_capture({"kind": "summarize", "document_id": "doc-1", "user_id": "user-1"})

        (job,) = mock_orchestrator.handle.await_args.args
        assert isinstance(job, SummarizeJob)
        assert job.attempt == 1
        assert result["status"] == "done"
