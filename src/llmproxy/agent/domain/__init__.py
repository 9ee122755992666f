"""Domain layer: entities, error kinds and port interfaces."""
from .entities import (
    AgentReply,
    AgentRun,
    AgentState,
    ErrorType,
    MessageRole,
    ReasoningContext,
    ReasoningResult,
    SearchResult,
    ToolCall,
    ToolDefinition,
    Turn,
    WindowPolicy,
)
from .exceptions import (
    AgentError,
    AgentExecutionFailedError,
    AgentTimeoutError,
    InvalidArgumentError,
    InvalidToolArgumentsError,
    UnknownToolError,
)
from .ports import IConversationStore, IReasoningProvider, ISearchProvider

__all__ = [
    "AgentError",
    "AgentExecutionFailedError",
    "AgentReply",
    "AgentRun",
    "AgentState",
    "AgentTimeoutError",
    "ErrorType",
    "IConversationStore",
    "IReasoningProvider",
    "ISearchProvider",
    "InvalidArgumentError",
    "InvalidToolArgumentsError",
    "MessageRole",
    "ReasoningContext",
    "ReasoningResult",
    "SearchResult",
    "ToolCall",
    "ToolDefinition",
    "Turn",
    "UnknownToolError",
    "WindowPolicy",
]
