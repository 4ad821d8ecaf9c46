"""LLM provider abstraction for summarization and bionic transforms."""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Literal

ResponseFormat = Literal["text", "json"]

_CODE_FENCE = re.compile(r"^```(?:json)?\s*([\s\S]*?)\s*```$")


@dataclass
class LLMResponse:
    """Response from LLM provider.

    Attributes:
        content: Generated text response
        tokens_input: Input tokens consumed
        tokens_output: Output tokens generated
        model: Model identifier used
        provider: Provider name
    """

    content: str
    tokens_input: int
    tokens_output: int
    model: str
    provider: str

    @property
    def total_tokens(self) -> int:
        """Total tokens consumed."""
        return self.tokens_input + self.tokens_output


class LLMProvider(ABC):
    """Abstract base class for LLM providers.

    Implementations make one single-shot request per generate() call; no
    retries happen at this layer.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return provider identifier (e.g., 'openai', 'anthropic')."""
        pass

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        response_format: ResponseFormat = "text",
        max_tokens: int = 4096,
        temperature: float = 0.3,
    ) -> LLMResponse:
        """Generate a completion for a single prompt.

        Args:
            prompt: User prompt
            system_prompt: Optional system instructions
            response_format: "json" asks the service to return a JSON object
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature (0-1)

        Returns:
            LLMResponse with generated content and usage stats

        Raises:
            LLMProviderError: If generation fails
        """
        pass


class LLMProviderError(Exception):
    """Exception raised when LLM provider fails."""

    def __init__(
        self, provider: str, message: str, original_error: Exception | None = None
    ):
        self.provider = provider
        self.message = message
        self.original_error = original_error
        super().__init__(f"[{provider}] {message}")


def strip_code_fence(text: str) -> str:
    """Remove a surrounding ```json fence some models add around JSON output."""
    text = text.strip()
    match = _CODE_FENCE.match(text)
    return match.group(1) if match else text
