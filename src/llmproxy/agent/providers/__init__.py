"""Reasoning provider adapters (OpenAI, Anthropic)."""
from .anthropic import AnthropicProvider
from .base import BaseReasoningProvider, LLMProviderConfig, LLMProviderError
from .openai import OpenAIProvider

__all__ = [
    "AnthropicProvider",
    "BaseReasoningProvider",
    "LLMProviderConfig",
    "LLMProviderError",
    "OpenAIProvider",
]
