"""Agent orchestration: request loop, prompt building and tool execution."""
from .agent import FALLBACK_ANSWER, AgentConfig, AgentOrchestrator
from .prompt_builder import PromptBuilder
from .tool_executor import ToolExecutor

__all__ = [
    "AgentConfig",
    "AgentOrchestrator",
    "FALLBACK_ANSWER",
    "PromptBuilder",
    "ToolExecutor",
]
