"""
Celery configuration settings.

Manages Celery broker and result backend configuration, the retry policy
shared by every ingestion job and the per-queue worker concurrency.

Dependencies: pydantic, pydantic_settings
System role: Async task queue configuration for document ingestion
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from linkmeld.configs.base import BaseSettings


class CelerySettings(BaseSettings):
    """Celery and Redis configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CELERY_",
        case_sensitive=False,
        extra="ignore",
    )

    broker_host: str = Field(default="localhost", description="Redis broker host")
    broker_port: int = Field(default=6379, description="Redis broker port")
    broker_db: int = Field(default=0, description="Redis broker database number")
    result_backend_db: int = Field(default=1, description="Redis result backend database number")

    task_serializer: str = Field(default="json", description="Task serialization format")
    result_serializer: str = Field(default="json", description="Result serialization format")
    accept_content: list[str] = Field(
        default=["json"],
        description="Accepted content types",
    )
    timezone: str = Field(default="UTC", description="Celery timezone")

    # Retry policy
    task_max_attempts: int = Field(default=3, description="Total attempts per job, first run included")
    task_retry_backoff: int = Field(default=5, description="Exponential backoff base in seconds")
    task_retry_backoff_max: int = Field(
        default=600,
        description="Maximum retry backoff in seconds",
    )

    # Queues
    pdf_queue: str = Field(default="pdf", description="Queue for PDF fetch jobs")
    ai_queue: str = Field(default="ai", description="Queue for summarization jobs")
    embed_queue: str = Field(default="embed", description="Queue for embedding index/delete jobs")
    pdf_concurrency: int = Field(default=5, description="Worker concurrency for the PDF queue")
    ai_concurrency: int = Field(default=3, description="Worker concurrency for the AI queue")
    embed_concurrency: int = Field(default=2, description="Worker concurrency for the embed queue")

    @property
    def broker_url(self) -> str:
        """
        Construct Redis broker URL.

        Returns:
            str: Celery-compatible broker URL
        """
        return f"redis://{self.broker_host}:{self.broker_port}/{self.broker_db}"

    @property
    def result_backend_url(self) -> str:
        """
        Construct Redis result backend URL.

        Returns:
            str: Celery-compatible result backend URL
        """
        return f"redis://{self.broker_host}:{self.broker_port}/{self.result_backend_db}"

    @property
    def task_max_retries(self) -> int:
        """Retries granted after the first attempt."""
        return max(self.task_max_attempts - 1, 0)

    def concurrency_for(self, queue: str) -> int:
        """
        Resolve worker concurrency for a queue name.

        Args:
            queue: Queue name

        Returns:
            int: Number of worker processes for that queue

        Raises:
            ValueError: Unknown queue name
        """
        concurrency = {
            self.pdf_queue: self.pdf_concurrency,
            self.ai_queue: self.ai_concurrency,
            self.embed_queue: self.embed_concurrency,
        }
        if queue not in concurrency:
            raise ValueError(f"Unknown queue: {queue}")
        return concurrency[queue]
