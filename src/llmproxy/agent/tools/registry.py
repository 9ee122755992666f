"""
Tool Registry.

Holds the capabilities the agent may offer to the reasoning model and
routes validated invocations to their handlers.

A tool is described by data: a name, a description, a pydantic model for
its arguments and an async handler. The JSON Schema advertised to the
model is generated from the arguments model, and the same model validates
whatever the model sends back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Optional

from pydantic import BaseModel, ValidationError

from ..domain.entities import ToolDefinition
from ..domain.exceptions import InvalidToolArgumentsError, UnknownToolError

logger = logging.getLogger(__name__)

ToolHandler = Callable[[Any], Awaitable[str]]


@dataclass(frozen=True)
class Tool:
    """A registered capability.

    Attributes:
        name: Tool name advertised to the model
        description: What the tool does, as the model reads it
        arguments_model: Pydantic model describing and validating arguments
        handler: Async callable receiving a validated arguments model
        timeout_seconds: Own deadline; None defers to the executor default
    """

    name: str
    description: str
    arguments_model: type[BaseModel]
    handler: ToolHandler
    timeout_seconds: Optional[float] = None

    def definition(self) -> ToolDefinition:
        schema = self.arguments_model.model_json_schema()
        schema.pop("title", None)
        return ToolDefinition(
            name=self.name,
            description=self.description,
            parameters=schema,
            timeout_seconds=self.timeout_seconds,
        )


class ToolRegistry:
    """Registry of agent tools.

    Usage:
        registry = ToolRegistry()
        registry.register(create_web_search_tool(search_client))

        definitions = registry.list_tools()
        text = await registry.invoke("web_search", {"query": "python 3.13"})
    """

    def __init__(self, tools: Optional[Iterable[Tool]] = None):
        self._tools: dict[str, Tool] = {}
        for tool in tools or ():
            self.register(tool)

    def register(self, tool: Tool) -> None:
        """Add a tool. Names must be unique."""
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")
        self._tools[tool.name] = tool
        logger.info(f"Registered tool: {tool.name}")

    def get(self, name: str) -> Tool:
        tool = self._tools.get(name)
        if tool is None:
            raise UnknownToolError(name)
        return tool

    def names(self) -> list[str]:
        return list(self._tools)

    def list_tools(self) -> list[ToolDefinition]:
        """Return tool definitions in registration order."""
        return [tool.definition() for tool in self._tools.values()]

    def subset(self, names: Iterable[str]) -> list[ToolDefinition]:
        """Return definitions for ``names``, in registration order.

        Raises:
            UnknownToolError: If any name is not registered
        """
        wanted = list(names)
        for name in wanted:
            if name not in self._tools:
                raise UnknownToolError(name)
        return [tool.definition() for tool in self._tools.values() if tool.name in wanted]

    async def invoke(self, name: str, arguments: dict[str, Any]) -> str:
        """Validate ``arguments`` and run the named tool.

        Args:
            name: Registered tool name
            arguments: Raw arguments as sent by the model

        Returns:
            Tool result text

        Raises:
            UnknownToolError: If the tool is not registered
            InvalidToolArgumentsError: If arguments fail validation
        """
        tool = self.get(name)

        try:
            validated = tool.arguments_model.model_validate(arguments)
        except ValidationError as e:
            errors = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'arguments'}: {err['msg']}"
                for err in e.errors()
            )
            raise InvalidToolArgumentsError(name, errors, cause=e) from e

        logger.debug(f"Invoking tool {name} with {validated.model_dump()}")
        return await tool.handler(validated)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
