"""
Gemini embedding client.

POSTs one text to the Generative Language embedContent endpoint and returns
an EmbeddingResult instead of raising, so the indexing path can skip a bad
chunk while the query path treats the same outcome as fatal.

Dependencies: httpx, pydantic, linkmeld.core.retry
System role: Text to vector conversion for indexing and retrieval
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

import httpx
from pydantic import BaseModel

from linkmeld.configs.gemini import GeminiSettings
from linkmeld.core.retry import with_retry
from linkmeld.observability.log_utils import safe_log_value

logger = logging.getLogger(__name__)

# Status codes that will fail every request made with the same key
FATAL_STATUS_CODES = frozenset({401, 403})


class EmbeddingTaskType(str, Enum):
    """Task type hint sent to the embedding model."""

    DOCUMENT = "RETRIEVAL_DOCUMENT"
    QUERY = "RETRIEVAL_QUERY"


class EmbeddingStatus(str, Enum):
    """Outcome of a single embedding request."""

    SUCCESS = "success"
    SKIP = "skip"
    FATAL = "fatal"


class EmbeddingResult(BaseModel):
    """
    Embedding outcome.

    Attributes:
        status: SUCCESS carries a vector; SKIP drops this unit only;
            FATAL means no further request with the same key can succeed
        vector: Embedding values when status is SUCCESS
        reason: Failure description for logs and errors
    """

    status: EmbeddingStatus
    vector: list[float] | None = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        """Whether a usable vector is present."""
        return self.status == EmbeddingStatus.SUCCESS

    @classmethod
    def success(cls, vector: list[float]) -> "EmbeddingResult":
        return cls(status=EmbeddingStatus.SUCCESS, vector=vector)

    @classmethod
    def skip(cls, reason: str) -> "EmbeddingResult":
        return cls(status=EmbeddingStatus.SKIP, reason=reason)

    @classmethod
    def fatal(cls, reason: str) -> "EmbeddingResult":
        return cls(status=EmbeddingStatus.FATAL, reason=reason)


class GeminiEmbeddingClient:
    """Embed texts via the Gemini embedContent REST endpoint."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: GeminiSettings | None = None,
        vector_size: int = 3072,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize embedding client.

        Args:
            http_client: Shared async HTTP client owned by the process
            settings: Gemini settings (model and base URL)
            vector_size: Expected embedding dimension
            sleep: Retry sleep function (injectable for tests)
        """
        self._http = http_client
        self._settings = settings or GeminiSettings()
        self._vector_size = vector_size
        self._sleep = sleep
        self._endpoint = (
            f"{self._settings.api_base.rstrip('/')}/models/"
            f"{self._settings.embedding_model}:embedContent"
        )

    @property
    def vector_size(self) -> int:
        return self._vector_size

    async def embed(
        self,
        text: str,
        api_key: str,
        task_type: EmbeddingTaskType,
        max_retries: int = 3,
        initial_delay: float = 2.0,
    ) -> EmbeddingResult:
        """
        Embed a single text.

        Args:
            text: Chunk or query text
            api_key: User's Gemini API key
            task_type: RETRIEVAL_DOCUMENT for chunks, RETRIEVAL_QUERY for queries
            max_retries: Retries after the first request
            initial_delay: Retry base delay in seconds

        Returns:
            EmbeddingResult: Never raises for provider or transport failures
        """
        if not api_key:
            return EmbeddingResult.fatal("API key is required for embeddings")
        if not text or not text.strip():
            return EmbeddingResult.skip("Empty text")

        payload: dict[str, Any] = {
            "content": {"parts": [{"text": text}]},
            "taskType": task_type.value,
        }

        async def request() -> httpx.Response:
            response = await self._http.post(
                self._endpoint,
                params={"key": api_key},
                json=payload,
                timeout=self._settings.embedding_timeout_s,
            )
            response.raise_for_status()
            return response

        try:
            response = await with_retry(
                request,
                max_retries=max_retries,
                initial_delay=initial_delay,
                operation_name="embed_content",
                sleep=self._sleep,
            )
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error(
                f"{__name__}:embed - Embedding API error {status_code}",
                extra={
                    "status_code": status_code,
                    "error_payload": safe_log_value(e.response.text),
                    "task_type": task_type.value,
                },
            )
            reason = f"Embedding API error {status_code}"
            if status_code in FATAL_STATUS_CODES:
                return EmbeddingResult.fatal(reason)
            return EmbeddingResult.skip(reason)
        except httpx.HTTPError as e:
            logger.error(f"{__name__}:embed - Transport error: {type(e).__name__}: {e}")
            return EmbeddingResult.skip(f"Embedding transport error: {type(e).__name__}")

        return self._parse(response)

    def _parse(self, response: httpx.Response) -> EmbeddingResult:
        try:
            data = response.json()
        except ValueError:
            logger.error(f"{__name__}:embed - Invalid JSON from embedding API")
            return EmbeddingResult.skip("Invalid JSON response")

        values = (data.get("embedding") or {}).get("values") if isinstance(data, dict) else None
        if not isinstance(values, list) or not values:
            logger.error(
                f"{__name__}:embed - Response has no embedding values",
                extra={"error_payload": safe_log_value(response.text)},
            )
            return EmbeddingResult.skip("Missing embedding values")

        if len(values) != self._vector_size:
            logger.error(
                f"{__name__}:embed - Invalid embedding dimension: "
                f"got {len(values)}, expected {self._vector_size}"
            )
            return EmbeddingResult.skip(
                f"Invalid embedding dimension {len(values)} (expected {self._vector_size})"
            )

        return EmbeddingResult.success([float(v) for v in values])
