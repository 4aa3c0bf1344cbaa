"""
Blob storage configuration.

Settings for the S3 bucket that keeps the original bytes of captured PDFs.

Dependencies: pydantic_settings
System role: PDF blob storage configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from linkmeld.configs.base import BaseSettings


class BlobStorageSettings(BaseSettings):
    """Settings for S3 PDF uploads."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="S3_",
        case_sensitive=False,
        extra="ignore",
    )

    bucket: str = Field(default="linkmeld-captures", description="S3 bucket for PDF blobs")
    region: str = Field(default="us-east-1", description="AWS region of the bucket")
    key_prefix: str = Field(default="pdfs", description="Key prefix for uploaded PDFs")
