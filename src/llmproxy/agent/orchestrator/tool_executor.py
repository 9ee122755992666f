"""
Tool Executor.

Runs a requested tool call under its deadline and records the result on
the ToolCall. Routing and argument validation are delegated to the
ToolRegistry.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Iterable

from ..domain.entities import ToolCall
from ..domain.exceptions import AgentTimeoutError, UnknownToolError
from ..tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class ToolExecutor:
    """Executes tool calls requested by the reasoning model.

    Usage:
        executor = ToolExecutor(tool_registry)
        tool_call = await executor.execute_tool_call(
            tool_call,
            offered=["web_search"],
            conversation_id="c1",
        )

    Architecture:
        - Rejects names outside the set offered for this request
        - Delegates validation and invocation to ToolRegistry
        - Applies the tool's own deadline, else the executor default
        - Lets UnknownTool, InvalidArgument and Timeout errors propagate
    """

    def __init__(
        self,
        tool_registry: ToolRegistry,
        default_timeout_seconds: float = 20.0,
    ):
        """Initialize the tool executor.

        Args:
            tool_registry: Registry for tool lookup and invocation
            default_timeout_seconds: Deadline for tools that declare none
        """
        self.tools = tool_registry
        self.default_timeout_seconds = default_timeout_seconds

    async def execute_tool_call(
        self,
        tool_call: ToolCall,
        offered: Iterable[str],
        conversation_id: str,
    ) -> ToolCall:
        """Execute a tool call and populate its result.

        Args:
            tool_call: Tool call from the model
            offered: Names of the tools offered for this request
            conversation_id: Current conversation ID for logging

        Returns:
            The same ToolCall with ``result`` and ``executed_at`` set

        Raises:
            UnknownToolError: If the tool was not offered or is not registered
            InvalidToolArgumentsError: If arguments fail validation
            AgentTimeoutError: If the tool exceeds its deadline
        """
        if tool_call.name not in set(offered):
            raise UnknownToolError(
                tool_call.name,
                f"Tool '{tool_call.name}' was not offered for this request",
            )

        timeout = self.tools.get(tool_call.name).timeout_seconds or self.default_timeout_seconds
        logger.info(f"[{conversation_id}] Executing tool: {tool_call.name}")

        try:
            result = await asyncio.wait_for(
                self.tools.invoke(tool_call.name, tool_call.arguments),
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"[{conversation_id}] Tool {tool_call.name} timed out after {timeout}s")
            raise AgentTimeoutError(
                f"Tool '{tool_call.name}' timed out after {timeout}s",
                stage="tool",
                cause=e,
            ) from e

        tool_call.result = result
        tool_call.executed_at = datetime.now(timezone.utc)
        logger.debug(f"[{conversation_id}] Tool {tool_call.name} result: {result}")
        return tool_call
