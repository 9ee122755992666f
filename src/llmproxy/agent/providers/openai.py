"""
OpenAI GPT reasoning provider.

Uses the chat completions API with function tools. Executed tool calls
are replayed as an assistant ``tool_calls`` message followed by the
matching ``tool`` message, which is the shape the API expects when it is
asked to continue after a tool result.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import openai
from openai import AsyncOpenAI

from ..domain.entities import (
    ErrorType,
    ReasoningContext,
    ReasoningResult,
    ToolCall,
    ToolDefinition,
)
from .base import BaseReasoningProvider, LLMProviderConfig, LLMProviderError

logger = logging.getLogger(__name__)


class OpenAIProvider(BaseReasoningProvider):
    """OpenAI GPT provider implementation.

    Usage:
        config = LLMProviderConfig(api_key="sk-...", model="gpt-4o-mini")
        provider = OpenAIProvider(config)

        result = await provider.reason(context, registry.list_tools())
        if result.is_tool_request:
            ...
    """

    DEFAULT_MODEL = "gpt-4o-mini"

    def __init__(
        self,
        config: LLMProviderConfig,
        client: Optional[AsyncOpenAI] = None,
    ):
        """Initialize the OpenAI provider.

        Args:
            config: Provider configuration
            client: Optional pre-built client (shared with the /gpt routes)
        """
        super().__init__(config)
        self._owns_client = client is None
        self.client = client or AsyncOpenAI(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.timeout,
            max_retries=config.max_retries,
        )

    def _format_tools_for_api(
        self, tools: list[ToolDefinition]
    ) -> list[dict[str, Any]]:
        """Convert tools to OpenAI function format."""
        return [tool.to_openai_format() for tool in tools]

    def _format_messages_for_api(
        self, context: ReasoningContext
    ) -> list[dict[str, Any]]:
        """Convert a reasoning context to OpenAI chat messages."""
        api_messages: list[dict[str, Any]] = [
            {"role": "system", "content": context.instructions},
            {"role": "user", "content": context.input},
        ]

        for tc in context.tool_calls:
            api_messages.append({
                "role": "assistant",
                "content": None,
                "tool_calls": [
                    {
                        "id": tc.id,
                        "type": "function",
                        "function": {
                            "name": tc.name,
                            "arguments": json.dumps(tc.arguments),
                        },
                    }
                ],
            })
            api_messages.append({
                "role": "tool",
                "tool_call_id": tc.id,
                "content": tc.result or "",
            })

        return api_messages

    async def reason(
        self,
        context: ReasoningContext,
        tools: list[ToolDefinition],
        model: Optional[str] = None,
        allow_tool_calls: bool = True,
    ) -> ReasoningResult:
        model_name = self._resolve_model(model)
        kwargs: dict[str, Any] = {
            "model": model_name,
            "messages": self._format_messages_for_api(context),
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
        }
        if tools:
            kwargs["tools"] = self._format_tools_for_api(tools)
            if allow_tool_calls:
                kwargs["tool_choice"] = "auto"
                kwargs["parallel_tool_calls"] = False
            else:
                kwargs["tool_choice"] = "none"

        try:
            response = await self.client.chat.completions.create(**kwargs)
        except openai.RateLimitError as e:
            logger.warning(f"Rate limited by OpenAI: {e}")
            raise LLMProviderError(
                f"Rate limited: {e}",
                error_type=ErrorType.RATE_LIMIT,
                original_error=e,
            ) from e
        except openai.APITimeoutError as e:
            logger.error(f"OpenAI request timed out: {e}")
            raise LLMProviderError(
                f"Request timed out: {e}",
                error_type=ErrorType.TIMEOUT,
                original_error=e,
            ) from e
        except openai.APIError as e:
            logger.error(f"OpenAI API error: {e}")
            raise LLMProviderError(
                f"API error: {e}",
                error_type=ErrorType.RECOVERABLE,
                original_error=e,
            ) from e

        if not response.choices:
            return ReasoningResult.answer("", model=response.model)

        message = response.choices[0].message
        if message.tool_calls:
            if len(message.tool_calls) > 1:
                logger.warning(
                    f"Model requested {len(message.tool_calls)} tool calls; "
                    f"only the first is honoured"
                )
            tc = message.tool_calls[0]
            return ReasoningResult.tool_request(
                ToolCall(
                    id=tc.id,
                    name=tc.function.name,
                    arguments=_parse_arguments(tc.function.arguments),
                ),
                model=response.model,
            )

        return ReasoningResult.answer(message.content, model=response.model)

    async def close(self) -> None:
        if self._owns_client:
            await self.client.close()


def _parse_arguments(raw: Optional[str]) -> dict[str, Any]:
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning(f"Failed to parse tool arguments: {raw}")
        return {"raw": raw}
    if not isinstance(parsed, dict):
        return {"raw": raw}
    return parsed
