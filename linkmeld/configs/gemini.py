"""
Gemini model configuration settings.

Model identifiers and generation parameters for embeddings,
conversation streaming and summarization.

Dependencies: pydantic, pydantic_settings
System role: LLM and embedding provider configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from linkmeld.configs.base import BaseSettings


class GeminiSettings(BaseSettings):
    """Google Gemini configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="GEMINI_",
        case_sensitive=False,
        extra="ignore",
    )

    api_base: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Generative Language REST API base URL",
    )
    embedding_model: str = Field(
        default="gemini-embedding-001",
        description="Embedding model used for chunks and queries",
    )
    embedding_timeout_s: float = Field(default=30.0, description="Embedding HTTP timeout in seconds")

    chat_model: str = Field(default="gemini-2.0-flash", description="Default conversation model")
    summary_model: str = Field(default="gemini-2.0-flash", description="Summarization model")
    temperature: float = Field(default=0.7, description="Sampling temperature")
    top_p: float = Field(default=0.9, description="Nucleus sampling threshold")
    max_output_tokens: int = Field(default=1000, description="Maximum tokens per conversation answer")
    summary_timeout_s: float = Field(default=30.0, description="Hard timeout for one summary call")

    fallback_api_key: str | None = Field(
        default=None,
        repr=False,
        description="Key used by background jobs when neither the job nor the user provides one",
    )
