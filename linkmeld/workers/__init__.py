"""
Celery workers module.

Celery app for the pdf, ai and embed queues.

Dependencies: celery, linkmeld.configs
System role: Background task processing
"""

from celery import Celery

from linkmeld.configs import get_settings

settings = get_settings()
celery_config = settings.celery

PROCESS_PDF_TASK = "linkmeld.process_pdf"
SUMMARIZE_TASK = "linkmeld.summarize_capture"
EMBED_TASK = "linkmeld.embed_capture"

celery_app = Celery(
    "linkmeld",
    broker=celery_config.broker_url,
    backend=celery_config.result_backend_url,
    include=["linkmeld.workers.tasks.ingestion_tasks"],
)

celery_app.conf.update(
    task_serializer=celery_config.task_serializer,
    result_serializer=celery_config.result_serializer,
    accept_content=celery_config.accept_content,
    timezone=celery_config.timezone,
    task_acks_late=True,
    task_routes={
        PROCESS_PDF_TASK: {"queue": celery_config.pdf_queue},
        SUMMARIZE_TASK: {"queue": celery_config.ai_queue},
        EMBED_TASK: {"queue": celery_config.embed_queue},
    },
)


def worker_concurrency_for(queue: str) -> int:
    """Worker process count for a queue (pdf=5, ai=3, embed=2 by default)."""
    return celery_config.concurrency_for(queue)


def worker_argv(queue: str) -> list[str]:
    """Celery worker arguments consuming a single queue at its configured concurrency."""
    return [
        "worker",
        f"--queues={queue}",
        f"--concurrency={worker_concurrency_for(queue)}",
        f"--hostname={queue}@%h",
        f"--loglevel={settings.log_level}",
    ]
