"""
Remote PDF fetcher.

HEAD pre-check (content type and size cap), retried download and text
extraction with pypdf. Extraction is CPU-bound and runs in a worker thread.

Dependencies: httpx, pypdf, linkmeld.core.retry
System role: PDF acquisition for the PdfFetch job
"""

import asyncio
import io
import logging
import posixpath
from collections.abc import Awaitable, Callable
from urllib.parse import unquote, urlparse

import httpx
from pydantic import BaseModel
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from linkmeld.configs.pipeline import PipelineSettings
from linkmeld.core.exceptions import PdfFetchError
from linkmeld.core.retry import with_retry

logger = logging.getLogger(__name__)

REQUEST_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; LinkMeldBot/1.0)",
    "Accept": "application/pdf",
}
HEAD_TIMEOUT_S = 10.0
DOWNLOAD_TIMEOUT_S = 60.0


class DownloadedPdf(BaseModel):
    """
    Downloaded PDF.

    Attributes:
        url: Source URL
        file_name: File name derived from the URL path
        data: Raw bytes
    """

    url: str
    file_name: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def title(self) -> str:
        stem = self.file_name[:-4] if self.file_name.lower().endswith(".pdf") else self.file_name
        return stem.strip() or "Untitled"


def file_name_from_url(url: str) -> str:
    path = unquote(urlparse(url).path)
    return posixpath.basename(path) or "document.pdf"


class PdfFetcher:
    """Download and extract remote PDFs."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: PipelineSettings | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize fetcher.

        Args:
            http_client: Shared async HTTP client
            settings: Size cap and retry budget
            sleep: Retry sleep function (injectable for tests)
        """
        self._http = http_client
        self._settings = settings or PipelineSettings()
        self._sleep = sleep

    async def check_remote_pdf(self, url: str) -> int:
        """
        HEAD pre-check of a remote PDF.

        Args:
            url: Remote PDF URL

        Returns:
            int: Declared size in bytes

        Raises:
            PdfFetchError: Not a PDF, missing/invalid length, or over the size cap
        """
        try:
            response = await self._http.head(
                url,
                headers=REQUEST_HEADERS,
                timeout=HEAD_TIMEOUT_S,
                follow_redirects=True,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise PdfFetchError(f"Failed to validate PDF: {e}", url=url) from e

        content_type = response.headers.get("content-type", "")
        content_length = response.headers.get("content-length")
        if "pdf" not in content_type.lower() or not content_length:
            raise PdfFetchError(
                "URL does not return a valid PDF file or missing content-length header.",
                url=url,
            )
        try:
            size = int(content_length)
        except ValueError as e:
            raise PdfFetchError("Invalid content-length header.", url=url) from e

        if size > self._settings.max_pdf_bytes:
            raise PdfFetchError(
                f"PDF file exceeds the {self._settings.max_pdf_bytes // (1024 * 1024)}MB limit.",
                url=url,
                details={"size": size},
            )
        return size

    async def download(self, url: str) -> DownloadedPdf:
        """
        Download a PDF with retry.

        Raises:
            httpx.HTTPError: Download failed after retries
            PdfFetchError: Body exceeds the size cap
        """

        async def fetch() -> bytes:
            response = await self._http.get(
                url,
                headers=REQUEST_HEADERS,
                timeout=DOWNLOAD_TIMEOUT_S,
                follow_redirects=True,
            )
            response.raise_for_status()
            return response.content

        data = await with_retry(
            fetch,
            max_retries=self._settings.download_max_retries,
            initial_delay=self._settings.download_initial_delay_s,
            operation_name="download_pdf",
            sleep=self._sleep,
        )
        if len(data) > self._settings.max_pdf_bytes:
            raise PdfFetchError("PDF file exceeds the size limit.", url=url, details={"size": len(data)})

        pdf = DownloadedPdf(url=url, file_name=file_name_from_url(url), data=data)
        logger.info(f"{__name__}:download - Downloaded PDF: {pdf.file_name} ({pdf.size} bytes)")
        return pdf

    async def extract_text(self, data: bytes) -> str:
        """Extract text from all pages."""
        return await asyncio.to_thread(_extract_text_sync, data)


def _extract_text_sync(data: bytes) -> str:
    try:
        reader = PdfReader(io.BytesIO(data))
        return "\n".join(page.extract_text() or "" for page in reader.pages)
    except PdfReadError as e:
        raise PdfFetchError(f"Unreadable PDF: {e}") from e
