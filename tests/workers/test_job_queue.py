"""
Test suite for CeleryJobQueue.

System role: Verification of job routing to the pdf, ai and embed queues
"""

from unittest.mock import MagicMock

import pytest

from linkmeld.configs.celery_config import CelerySettings
from linkmeld.models.jobs import EmbeddingTaskKind, EmbedJob, PdfFetchJob, SummarizeJob
from linkmeld.workers import EMBED_TASK, PROCESS_PDF_TASK, SUMMARIZE_TASK
from linkmeld.workers.job_queue import CeleryJobQueue


@pytest.fixture
def mock_celery_app() -> MagicMock:
    return MagicMock()


@pytest.fixture
def job_queue(mock_celery_app: MagicMock) -> CeleryJobQueue:
    return CeleryJobQueue(mock_celery_app, CelerySettings())


class TestRoute:
    """Test suite for CeleryJobQueue.route."""

    @pytest.mark.parametrize(
        "job, expected",
        [
            (
                PdfFetchJob(document_id="d", user_id="u", url="https://x/a.pdf"),
                (PROCESS_PDF_TASK, "pdf"),
            ),
            (SummarizeJob(document_id="d", user_id="u"), (SUMMARIZE_TASK, "ai")),
            (EmbedJob(document_id="d", user_id="u"), (EMBED_TASK, "embed")),
            (
                EmbedJob(document_id="d", user_id="u", task_type=EmbeddingTaskKind.DELETE),
                (EMBED_TASK, "embed"),
            ),
        ],
    )
    def test_jobs_should_route_by_kind(self, job_queue, job, expected) -> None:
        assert job_queue.route(job) == expected

    def test_unknown_job_should_raise(self, job_queue) -> None:
        with pytest.raises(TypeError):
            job_queue.route(object())


class TestEnqueue:
    """Test suite for CeleryJobQueue.enqueue."""

    @pytest.mark.asyncio
    async def test_enqueue_should_send_serialized_payload(
        self, job_queue, mock_celery_app
    ) -> None:
        """Test the job is published as JSON-safe kwargs without the attempt counter."""
        job = EmbedJob(document_id="doc-1", user_id="user-1", api_key="key-1", attempt=2)

        await job_queue.enqueue(job)

        mock_celery_app.send_task.assert_called_once_with(
            EMBED_TASK,
            kwargs={
                "payload": {
                    "document_id": "doc-1",
                    "user_id": "user-1",
                    "api_key": "key-1",
                    "kind": "embed",
                    "task_type": "index",
                }
            },
            queue="embed",
        )

    @pytest.mark.asyncio
    async def test_broker_failure_should_propagate(self, job_queue, mock_celery_app) -> None:
        mock_celery_app.send_task.side_effect = ConnectionError("redis down")

        with pytest.raises(ConnectionError):
            await job_queue.enqueue(SummarizeJob(document_id="doc-1", user_id="user-1"))
