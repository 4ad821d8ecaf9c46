"""Anthropic Claude provider implementation."""

import anthropic
from anthropic import AsyncAnthropic

from focusflow_processing.llm.base import (
    LLMProvider,
    LLMProviderError,
    LLMResponse,
    ResponseFormat,
)

JSON_ONLY_INSTRUCTION = (
    "Respond with a single valid JSON object only. "
    "Do not wrap it in markdown and do not add any text before or after it."
)


class AnthropicProvider(LLMProvider):
    """Anthropic messages API provider.

    The messages API has no JSON mode, so JSON responses are requested by
    instruction in the system prompt; callers strip stray code fences.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "claude-sonnet-4-5-20250929",
        client: AsyncAnthropic | None = None,
    ):
        if client is None and not api_key:
            raise LLMProviderError(
                provider="anthropic", message="ANTHROPIC_API_KEY not configured"
            )
        self.model = model
        self._client = client or AsyncAnthropic(api_key=api_key)

    @property
    def provider_name(self) -> str:
        return "anthropic"

    @property
    def client(self) -> AsyncAnthropic:
        return self._client

    async def generate(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        response_format: ResponseFormat = "text",
        max_tokens: int = 4096,
        temperature: float = 0.3,
    ) -> LLMResponse:
        system_parts = [part for part in (system_prompt,) if part]
        if response_format == "json":
            system_parts.append(JSON_ONLY_INSTRUCTION)

        kwargs = {}
        if system_parts:
            kwargs["system"] = "\n\n".join(system_parts)

        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                **kwargs,
            )
        except anthropic.AuthenticationError as e:
            raise LLMProviderError(
                provider="anthropic",
                message="Invalid API key",
                original_error=e,
            ) from e
        except anthropic.APIError as e:
            raise LLMProviderError(
                provider="anthropic",
                message=f"API error: {str(e)}",
                original_error=e,
            ) from e
        except Exception as e:
            raise LLMProviderError(
                provider="anthropic",
                message=str(e),
                original_error=e,
            ) from e

        # Extract text from content blocks
        content = ""
        for block in response.content:
            if block.type == "text":
                content += block.text

        return LLMResponse(
            content=content,
            tokens_input=response.usage.input_tokens,
            tokens_output=response.usage.output_tokens,
            model=self.model,
            provider=self.provider_name,
        )
