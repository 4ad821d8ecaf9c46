"""LLM provider factory and exports."""

from typing import Literal

from focusflow_processing.config import Settings
from focusflow_processing.llm.base import LLMProvider, LLMProviderError, LLMResponse
from focusflow_processing.llm.providers.anthropic import AnthropicProvider
from focusflow_processing.llm.providers.openai import OpenAIProvider

ProviderName = Literal["openai", "anthropic"]


def get_llm_provider(
    config: Settings,
    provider_override: ProviderName | None = None,
) -> LLMProvider:
    """Build the LLM provider selected by configuration.

    Called once at application startup; the instance is shared by all runs.

    Args:
        config: Application settings (API keys, model)
        provider_override: Explicit provider to use instead of LLM_PROVIDER

    Returns:
        Configured LLM provider instance

    Raises:
        ValueError: If provider name is invalid
        LLMProviderError: If the provider's API key is missing
    """
    provider_name = provider_override or config.llm_provider

    if provider_name == "openai":
        return OpenAIProvider(
            api_key=config.openai_api_key,
            model=config.llm_model if config.llm_provider == "openai" else "gpt-4o-mini",
        )
    elif provider_name == "anthropic":
        return AnthropicProvider(
            api_key=config.anthropic_api_key,
            model=(
                config.resolved_llm_model
                if config.llm_provider == "anthropic"
                else "claude-sonnet-4-5-20250929"
            ),
        )
    else:
        raise ValueError(f"Unknown LLM provider: {provider_name}")


__all__ = [
    "LLMProvider",
    "LLMProviderError",
    "LLMResponse",
    "OpenAIProvider",
    "AnthropicProvider",
    "get_llm_provider",
    "ProviderName",
]
