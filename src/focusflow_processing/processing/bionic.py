"""Summary to Bionic Reading JSON transform."""

from pydantic import ValidationError

from focusflow_processing.exceptions import TransformError
from focusflow_processing.llm import LLMProvider, LLMProviderError, strip_code_fence
from focusflow_processing.logging_config import get_logger
from focusflow_processing.schemas.bionic import BionicDocument, parse_bionic_document
from focusflow_processing.schemas.preferences import UserPreferences

from .prompts import BIONIC_SYSTEM_PROMPT, build_bionic_prompt

logger = get_logger(__name__)


class BionicTransformer:
    """Ask the LLM to restructure a summary as a validated BionicDocument."""

    def __init__(
        self,
        provider: LLMProvider | None,
        emphasis_ratio: float = 0.4,
        temperature: float = 0.3,
        max_tokens: int = 4096,
    ) -> None:
        self._provider = provider
        self.emphasis_ratio = emphasis_ratio
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def to_bionic(
        self,
        summary: str,
        preferences: UserPreferences | None = None,
    ) -> BionicDocument:
        """Transform a summary into a Bionic Reading document.

        Raises:
            TransformError: If the provider is missing or fails, or the
                response does not parse into the document schema
        """
        if not summary.strip():
            raise TransformError("Cannot transform empty summary")
        if self._provider is None:
            raise TransformError("Bionic transform provider is not configured")

        prompt = build_bionic_prompt(summary, self.emphasis_ratio, preferences)
        try:
            response = await self._provider.generate(
                prompt,
                system_prompt=BIONIC_SYSTEM_PROMPT,
                response_format="json",
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except LLMProviderError as e:
            raise TransformError(f"Bionic transform failed: {e}") from e

        try:
            document = parse_bionic_document(strip_code_fence(response.content))
        except ValidationError as e:
            raise TransformError(
                f"Bionic response does not match document schema: {e.error_count()} error(s)"
            ) from e
        except ValueError as e:
            raise TransformError(f"Bionic response is not valid JSON: {e}") from e

        logger.debug(
            "bionic_document_parsed",
            paragraphs=len(document.paragraphs),
            sentences=document.sentence_count,
            tokens=response.total_tokens,
        )
        return document
