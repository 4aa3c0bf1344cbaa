"""
Document summarizer.

Generates the structured capture summary with Gemini. Each attempt is
bounded by a hard timeout and attempts are retried through with_retry.

Dependencies: langchain_google_genai, langchain_core, linkmeld.core.retry
System role: Summary generation for the Summarize job
"""

import asyncio
import logging

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from linkmeld.configs.gemini import GeminiSettings
from linkmeld.configs.pipeline import PipelineSettings
from linkmeld.core.exceptions import SummarizationError
from linkmeld.core.rag.conversation_streamer import ChatModelFactory, chunk_to_text
from linkmeld.core.rag.prompts import format_summary_prompt
from linkmeld.core.retry import with_retry

logger = logging.getLogger(__name__)


def gemini_summary_model_factory(settings: GeminiSettings | None = None) -> ChatModelFactory:
    """Factory for per-key summary models."""
    s = settings or GeminiSettings()

    def factory(api_key: str, model: str) -> BaseChatModel:
        return ChatGoogleGenerativeAI(
            model=model,
            google_api_key=api_key,
            temperature=s.temperature,
            top_p=s.top_p,
        )

    return factory


class DocumentSummarizer:
    """Summarize capture text."""

    def __init__(
        self,
        model_factory: ChatModelFactory | None = None,
        gemini_settings: GeminiSettings | None = None,
        pipeline_settings: PipelineSettings | None = None,
        sleep=asyncio.sleep,
    ) -> None:
        self._gemini = gemini_settings or GeminiSettings()
        self._pipeline = pipeline_settings or PipelineSettings()
        self._model_factory = model_factory or gemini_summary_model_factory(self._gemini)
        self._sleep = sleep

    async def summarize(self, text: str, api_key: str, existing_summary: str = "") -> str:
        """
        Generate a summary.

        Args:
            text: Boilerplate-free capture text
            api_key: User's Gemini API key
            existing_summary: Previous summary to improve on

        Returns:
            str: Summary text

        Raises:
            SummarizationError: Timeout, provider failure or unusable output
        """
        model = self._model_factory(api_key, self._gemini.summary_model)
        messages = [HumanMessage(content=format_summary_prompt(text, existing_summary))]

        async def generate() -> str:
            try:
                response = await asyncio.wait_for(
                    model.ainvoke(messages),
                    timeout=self._gemini.summary_timeout_s,
                )
            except asyncio.TimeoutError as e:
                raise SummarizationError("Summary request timed out") from e
            return chunk_to_text(response.content).strip()

        try:
            summary = await with_retry(
                generate,
                max_retries=self._pipeline.summary_max_retries,
                initial_delay=self._pipeline.summary_initial_delay_s,
                operation_name="generate_summary",
                sleep=self._sleep,
            )
        except SummarizationError:
            raise
        except Exception as e:
            raise SummarizationError(f"AI summary generation failed: {e}") from e

        if len(summary) < self._pipeline.min_summary_output_chars:
            raise SummarizationError("AI summary generation failed or empty")

        logger.info(f"{__name__}:summarize - Generated summary_len={len(summary)}")
        return summary
