"""
Ingestion and conversation pipeline settings.

Thresholds, retry budgets and window sizes shared by the chunker,
embedding client, job orchestrator and conversation streamer.

Dependencies: pydantic, pydantic_settings
System role: Pipeline tuning configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from linkmeld.configs.base import BaseSettings


class PipelineSettings(BaseSettings):
    """Document pipeline configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PIPELINE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Chunking
    chunk_max_length: int = Field(default=500, description="Maximum characters per chunk")

    # Retry budgets (retries after the first call, delay in seconds)
    embed_max_retries: int = Field(default=3, description="Embedding request retries")
    embed_initial_delay_s: float = Field(default=2.0, description="Embedding retry base delay")
    upsert_max_retries: int = Field(default=3, description="Vector store write retries")
    upsert_initial_delay_s: float = Field(default=2.0, description="Vector store write base delay")
    download_max_retries: int = Field(default=3, description="PDF download retries")
    download_initial_delay_s: float = Field(default=2.0, description="PDF download base delay")
    summary_max_retries: int = Field(default=2, description="Summary generation retries")
    summary_initial_delay_s: float = Field(default=2.0, description="Summary retry base delay")

    # Content thresholds
    min_summary_input_chars: int = Field(
        default=50,
        description="Clean text shorter than this is not summarized or embedded",
    )
    min_pdf_text_chars: int = Field(default=100, description="Minimum extracted PDF text length")
    min_summary_output_chars: int = Field(default=30, description="Shorter summaries count as failures")
    max_pdf_bytes: int = Field(default=5 * 1024 * 1024, description="Maximum remote PDF size")

    # Conversation
    conversation_window: int = Field(default=6, description="Recent turns rendered into the prompt")
    max_query_chars: int = Field(default=1000, description="Retrieval query length cap")
    summary_prompt_chars: int = Field(default=1500, description="Summary length cap inside prompts")
    conversation_timeout_s: float = Field(
        default=60.0,
        description="Hard timeout while waiting on the model stream",
    )
