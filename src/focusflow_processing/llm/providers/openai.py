"""OpenAI LLM provider implementation."""

import openai
from openai import AsyncOpenAI

from focusflow_processing.llm.base import (
    LLMProvider,
    LLMProviderError,
    LLMResponse,
    ResponseFormat,
)


class OpenAIProvider(LLMProvider):
    """OpenAI chat completions provider.

    JSON responses use the service's JSON mode (``response_format``
    ``json_object``), which guarantees syntactically valid JSON output.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-4o-mini",
        client: AsyncOpenAI | None = None,
    ):
        if client is None and not api_key:
            raise LLMProviderError(provider="openai", message="OPENAI_API_KEY not configured")
        self.model = model
        self._client = client or AsyncOpenAI(api_key=api_key)

    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def client(self) -> AsyncOpenAI:
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
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        kwargs = {}
        if response_format == "json":
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature,
                **kwargs,
            )
        except openai.AuthenticationError as e:
            raise LLMProviderError(
                provider="openai",
                message="Invalid API key",
                original_error=e,
            ) from e
        except openai.APIError as e:
            raise LLMProviderError(
                provider="openai",
                message=f"API error: {e.message}",
                original_error=e,
            ) from e
        except Exception as e:
            raise LLMProviderError(
                provider="openai",
                message=str(e),
                original_error=e,
            ) from e

        choice = response.choices[0]
        usage = response.usage

        return LLMResponse(
            content=choice.message.content or "",
            tokens_input=usage.prompt_tokens if usage else 0,
            tokens_output=usage.completion_tokens if usage else 0,
            model=self.model,
            provider=self.provider_name,
        )
