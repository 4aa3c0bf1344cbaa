"""
Ingestion job schemas.

Typed job payloads carried by the queue. ProcessingJob is a discriminated
union on `kind`, so a raw queue message validates straight into the right
job class.

Dependencies: pydantic
System role: Queue message contract for the ingestion pipeline
"""

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, Field, TypeAdapter


class EmbeddingTaskKind(str, Enum):
    """What an embed job does to the vector index."""

    INDEX = "index"
    DELETE = "delete"


class BaseJob(BaseModel):
    """
    Fields shared by every job.

    Attributes:
        document_id: Capture ID
        user_id: Owner ID
        api_key: User's Gemini API key when the producer has it
        attempt: Delivery attempt (1-based), filled in by the worker
    """

    document_id: str = Field(min_length=1)
    user_id: str = Field(min_length=1)
    api_key: str | None = Field(default=None, repr=False)
    attempt: int = Field(default=1, ge=1)


class SummarizeJob(BaseJob):
    kind: Literal["summarize"] = "summarize"


class EmbedJob(BaseJob):
    kind: Literal["embed"] = "embed"
    task_type: EmbeddingTaskKind = EmbeddingTaskKind.INDEX


class PdfFetchJob(BaseJob):
    kind: Literal["pdf_fetch"] = "pdf_fetch"
    url: str = Field(min_length=1)


ProcessingJob = Annotated[
    SummarizeJob | EmbedJob | PdfFetchJob,
    Field(discriminator="kind"),
]

processing_job_adapter: TypeAdapter[ProcessingJob] = TypeAdapter(ProcessingJob)


def parse_job(payload: dict) -> SummarizeJob | EmbedJob | PdfFetchJob:
    """Validate a raw queue payload into its job class."""
    return processing_job_adapter.validate_python(payload)
