"""Blob storage adapters."""

from linkmeld.boundary.storage.s3_blob_storage import S3BlobStorage

__all__ = ["S3BlobStorage"]
