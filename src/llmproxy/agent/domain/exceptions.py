"""Error kinds raised by the agent core.

Each kind carries the HTTP status the agent router maps it to:

    AgentError (base, extends LLMProxyError)
    ├── InvalidArgumentError (400)
    │   └── InvalidToolArgumentsError
    ├── UnknownToolError (400)
    ├── AgentExecutionFailedError (502)
    └── AgentTimeoutError (504)
"""
from typing import Optional

from ...api.exceptions import LLMProxyError


class AgentError(LLMProxyError):
    """Base class for agent failures."""

    code_name: str = "AgentError"

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("code", self.code_name)
        super().__init__(message, **kwargs)


class InvalidArgumentError(AgentError):
    """A request or tool argument is missing or malformed."""

    status_code = 400
    code_name = "InvalidArgument"


class InvalidToolArgumentsError(InvalidArgumentError):
    """Tool arguments failed schema validation."""

    def __init__(self, tool_name: str, message: str, **kwargs):
        details = kwargs.pop("details", {})
        details["tool"] = tool_name
        super().__init__(
            f"Invalid arguments for tool '{tool_name}': {message}",
            details=details,
            **kwargs,
        )
        self.tool_name = tool_name


class UnknownToolError(AgentError):
    """A tool name is not registered."""

    status_code = 400
    code_name = "UnknownTool"

    def __init__(self, tool_name: str, message: Optional[str] = None, **kwargs):
        super().__init__(message or f"Unknown tool: {tool_name}", **kwargs)
        self.tool_name = tool_name


class AgentExecutionFailedError(AgentError):
    """Reasoning failed, or the agent broke its own protocol."""

    status_code = 502
    code_name = "AgentExecutionFailed"

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("recoverable", True)
        super().__init__(message, **kwargs)


class AgentTimeoutError(AgentError):
    """A reasoning or tool deadline expired."""

    status_code = 504
    code_name = "Timeout"

    def __init__(self, message: str, stage: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if stage:
            details["stage"] = stage
        kwargs.setdefault("recoverable", True)
        super().__init__(message, details=details, **kwargs)
        self.stage = stage
