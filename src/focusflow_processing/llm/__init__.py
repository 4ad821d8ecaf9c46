"""Generative-language service adapters."""

from .base import LLMProvider, LLMProviderError, LLMResponse, ResponseFormat, strip_code_fence

__all__ = [
    "LLMProvider",
    "LLMProviderError",
    "LLMResponse",
    "ResponseFormat",
    "strip_code_fence",
]
