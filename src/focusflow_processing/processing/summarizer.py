"""Preference-aware summarization through an LLM provider."""

import json

from focusflow_processing.exceptions import SummarizationError
from focusflow_processing.llm import LLMProvider, LLMProviderError, strip_code_fence
from focusflow_processing.logging_config import get_logger
from focusflow_processing.schemas.preferences import UserPreferences

from .chunking import DEFAULT_CHUNK_SIZE, chunk_text
from .prompts import SUMMARY_SYSTEM_PROMPT, build_summary_prompt

logger = get_logger(__name__)


class Summarizer:
    """Summarize extracted text according to reader preferences.

    Text up to ``single_pass_max_chars`` is summarized in one call. Longer
    text is split with ``chunk_text``; each chunk is summarized in order and
    a final call condenses the joined partial summaries.
    """

    def __init__(
        self,
        provider: LLMProvider | None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        single_pass_max_chars: int = 12000,
        temperature: float = 0.3,
        max_tokens: int = 4096,
    ) -> None:
        self._provider = provider
        self.chunk_size = chunk_size
        self.single_pass_max_chars = single_pass_max_chars
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def summarize(
        self,
        text: str,
        preferences: UserPreferences | None = None,
        output_style: str | None = None,
    ) -> str:
        """Return a non-empty summary of ``text``.

        Raises:
            SummarizationError: If the provider is missing or fails, or the
                response is not a JSON object with a non-empty "summary"
        """
        if not text.strip():
            raise SummarizationError("Cannot summarize empty text")

        if len(text) <= self.single_pass_max_chars:
            return await self._summarize_once(text, preferences, output_style)

        chunks = chunk_text(text, self.chunk_size)
        logger.info("summarizing_in_chunks", chars=len(text), chunks=len(chunks))

        partials: list[str] = []
        for chunk in chunks:
            if not chunk.strip():
                continue
            partials.append(
                await self._summarize_once(chunk, preferences, output_style, partial=True)
            )

        return await self._summarize_once("\n\n".join(partials), preferences, output_style)

    async def _summarize_once(
        self,
        text: str,
        preferences: UserPreferences | None,
        output_style: str | None,
        partial: bool = False,
    ) -> str:
        if self._provider is None:
            raise SummarizationError("Summarization provider is not configured")

        prompt = build_summary_prompt(text, preferences, output_style, partial=partial)
        try:
            response = await self._provider.generate(
                prompt,
                system_prompt=SUMMARY_SYSTEM_PROMPT,
                response_format="json",
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except LLMProviderError as e:
            raise SummarizationError(f"Summarization failed: {e}") from e

        logger.debug(
            "summary_generated",
            provider=response.provider,
            model=response.model,
            tokens=response.total_tokens,
            partial=partial,
        )
        return _parse_summary(response.content)


def _parse_summary(content: str) -> str:
    try:
        data = json.loads(strip_code_fence(content))
    except json.JSONDecodeError as e:
        raise SummarizationError(f"Summary response is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise SummarizationError("Summary response is not a JSON object")

    summary = data.get("summary")
    if not isinstance(summary, str) or not summary.strip():
        raise SummarizationError("Summary response has no summary text")
    return summary.strip()
