"""Remote PDF download and text extraction."""

from linkmeld.boundary.pdf.pdf_fetcher import DownloadedPdf, PdfFetcher

__all__ = ["DownloadedPdf", "PdfFetcher"]
