"""
Anthropic Claude reasoning provider.

Claude takes the instructions as a separate ``system`` parameter. Executed
tool calls are replayed as an assistant ``tool_use`` block followed by a
user ``tool_result`` block.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import anthropic
from anthropic import AsyncAnthropic

from ..domain.entities import (
    ErrorType,
    ReasoningContext,
    ReasoningResult,
    ToolCall,
    ToolDefinition,
)
from .base import BaseReasoningProvider, LLMProviderConfig, LLMProviderError

logger = logging.getLogger(__name__)


class AnthropicProvider(BaseReasoningProvider):
    """Anthropic Claude provider implementation.

    Usage:
        config = LLMProviderConfig(
            api_key="sk-ant-...",
            model="claude-sonnet-4-5",
        )
        provider = AnthropicProvider(config)
        result = await provider.reason(context, tools)
    """

    DEFAULT_MODEL = "claude-sonnet-4-5"

    def __init__(
        self,
        config: LLMProviderConfig,
        client: Optional[AsyncAnthropic] = None,
    ):
        super().__init__(config)
        self._owns_client = client is None
        self.client = client or AsyncAnthropic(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.timeout,
            max_retries=config.max_retries,
        )

    def _format_tools_for_api(
        self, tools: list[ToolDefinition]
    ) -> list[dict[str, Any]]:
        """Convert tools to Anthropic format."""
        return [tool.to_anthropic_format() for tool in tools]

    def _format_messages_for_api(
        self, context: ReasoningContext
    ) -> list[dict[str, Any]]:
        api_messages: list[dict[str, Any]] = [
            {"role": "user", "content": context.input},
        ]

        for tc in context.tool_calls:
            api_messages.append({
                "role": "assistant",
                "content": [
                    {
                        "type": "tool_use",
                        "id": tc.id,
                        "name": tc.name,
                        "input": tc.arguments,
                    }
                ],
            })
            api_messages.append({
                "role": "user",
                "content": [
                    {
                        "type": "tool_result",
                        "tool_use_id": tc.id,
                        "content": tc.result or "",
                    }
                ],
            })

        return api_messages

    async def reason(
        self,
        context: ReasoningContext,
        tools: list[ToolDefinition],
        model: Optional[str] = None,
        allow_tool_calls: bool = True,
    ) -> ReasoningResult:
        kwargs: dict[str, Any] = {
            "model": self._resolve_model(model),
            "system": context.instructions,
            "messages": self._format_messages_for_api(context),
            "max_tokens": self.config.max_tokens,
            "temperature": self.config.temperature,
        }
        if tools:
            # tool_use blocks in the messages must reference declared tools
            kwargs["tools"] = self._format_tools_for_api(tools)
            if not allow_tool_calls:
                kwargs["tool_choice"] = {"type": "none"}

        try:
            response = await self.client.messages.create(**kwargs)
        except anthropic.RateLimitError as e:
            logger.warning(f"Rate limited by Anthropic: {e}")
            raise LLMProviderError(
                f"Rate limited: {e}",
                error_type=ErrorType.RATE_LIMIT,
                original_error=e,
            ) from e
        except anthropic.APITimeoutError as e:
            logger.error(f"Anthropic request timed out: {e}")
            raise LLMProviderError(
                f"Request timed out: {e}",
                error_type=ErrorType.TIMEOUT,
                original_error=e,
            ) from e
        except anthropic.APIError as e:
            logger.error(f"Anthropic API error: {e}")
            raise LLMProviderError(
                f"API error: {e}",
                error_type=ErrorType.RECOVERABLE,
                original_error=e,
            ) from e

        text_parts: list[str] = []
        for block in response.content:
            if block.type == "tool_use":
                arguments = block.input if isinstance(block.input, dict) else {"raw": block.input}
                return ReasoningResult.tool_request(
                    ToolCall(id=block.id, name=block.name, arguments=arguments),
                    model=response.model,
                )
            if block.type == "text":
                text_parts.append(block.text)

        return ReasoningResult.answer("".join(text_parts), model=response.model)

    async def close(self) -> None:
        if self._owns_client:
            await self.client.close()
