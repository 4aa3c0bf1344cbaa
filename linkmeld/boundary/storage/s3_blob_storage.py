"""
S3 blob storage for captured PDFs.

Uploads the original PDF bytes so the capture can be re-opened later.
boto3 is synchronous; calls run in a worker thread so they can overlap with
text extraction.

Dependencies: boto3
System role: PDF blob persistence
"""

import asyncio
import logging

import boto3
from botocore.exceptions import ClientError

from linkmeld.configs.blob_storage import BlobStorageSettings

logger = logging.getLogger(__name__)


class S3BlobStorage:
    """S3 client for capture PDF uploads."""

    def __init__(self, settings: BlobStorageSettings | None = None, s3_client=None) -> None:
        """
        Initialize S3 blob storage.

        Args:
            settings: Bucket, region and key prefix
            s3_client: Preconfigured boto3 S3 client (created from settings when omitted)
        """
        self._settings = settings or BlobStorageSettings()
        self._s3_client = s3_client or boto3.client("s3", region_name=self._settings.region)

    def key_for(self, user_id: str, document_id: str) -> str:
        """Object key for a capture's PDF."""
        return f"{self._settings.key_prefix}/{user_id}/{document_id}.pdf"

    async def upload_pdf(self, user_id: str, document_id: str, data: bytes) -> str:
        """
        Upload PDF bytes.

        Args:
            user_id: Owner ID
            document_id: Capture ID
            data: PDF content

        Returns:
            str: Object key

        Raises:
            ClientError: Upload rejected by S3
        """
        key = self.key_for(user_id, document_id)
        try:
            await asyncio.to_thread(
                self._s3_client.put_object,
                Bucket=self._settings.bucket,
                Key=key,
                Body=data,
                ContentType="application/pdf",
            )
        except ClientError as e:
            logger.error(
                f"{__name__}:upload_pdf - S3 upload failed: {e}",
                extra={"document_id": document_id, "bucket": self._settings.bucket},
            )
            raise

        logger.info(
            f"{__name__}:upload_pdf - Uploaded {len(data)} bytes",
            extra={"document_id": document_id, "key": key},
        )
        return key
