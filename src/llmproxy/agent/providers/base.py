"""
Base reasoning provider implementation.

Provides configuration and error types shared by all providers.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

from ..domain.entities import ErrorType, ReasoningContext, ReasoningResult, ToolDefinition
from ..domain.ports import IReasoningProvider

logger = logging.getLogger(__name__)


class LLMProviderError(Exception):
    """Base exception for LLM provider errors."""

    def __init__(
        self,
        message: str,
        error_type: ErrorType = ErrorType.RECOVERABLE,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.error_type = error_type
        self.original_error = original_error


@dataclass
class LLMProviderConfig:
    """Configuration for LLM providers.

    Attributes:
        api_key: API key for the provider
        model: Default model name
        base_url: Optional custom base URL
        timeout: Request timeout in seconds
        max_retries: Maximum SDK-level retry attempts
        temperature: Default temperature
        max_tokens: Default max tokens
    """

    api_key: str
    model: str
    base_url: Optional[str] = None
    timeout: float = 60.0
    max_retries: int = 2
    temperature: float = 0.7
    max_tokens: int = 4096
    extra: dict[str, Any] = field(default_factory=dict)


class BaseReasoningProvider(IReasoningProvider, ABC):
    """Base class for reasoning provider implementations.

    Subclasses translate the ReasoningContext into their API's message
    format and map SDK exceptions to LLMProviderError.
    """

    def __init__(self, config: LLMProviderConfig):
        self.config = config

    @property
    def model_name(self) -> str:
        """Return the default model name."""
        return self.config.model

    def _resolve_model(self, model: Optional[str]) -> str:
        return model or self.config.model

    @abstractmethod
    def _format_tools_for_api(
        self, tools: list[ToolDefinition]
    ) -> list[dict[str, Any]]:
        """Convert tool definitions to the provider's format."""
        pass

    @abstractmethod
    async def reason(
        self,
        context: ReasoningContext,
        tools: list[ToolDefinition],
        model: Optional[str] = None,
        allow_tool_calls: bool = True,
    ) -> ReasoningResult:
        """Run one reasoning step. Must be implemented by subclasses."""
        pass

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
