"""
Domain entities for the developer-assistant agent.

These are pure domain objects with no infrastructure dependencies.
They define the core data structures used throughout the agent module.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================
# Conversation Turns
# ============================================


class MessageRole(str, Enum):
    """Role of a turn in a conversation."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


@dataclass(frozen=True)
class Turn:
    """One utterance in a conversation log.

    Turns are immutable once created; the store only ever appends new ones
    or drops old ones from the head.

    Attributes:
        role: Who produced the turn
        content: Text of the turn
        timestamp: When the turn was created (UTC)
    """

    role: MessageRole
    content: str
    timestamp: datetime = field(default_factory=_utcnow)

    @classmethod
    def user(cls, content: str) -> Turn:
        return cls(role=MessageRole.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> Turn:
        return cls(role=MessageRole.ASSISTANT, content=content)

    @classmethod
    def system(cls, content: str) -> Turn:
        return cls(role=MessageRole.SYSTEM, content=content)

    @property
    def is_system(self) -> bool:
        return self.role == MessageRole.SYSTEM


@dataclass(frozen=True)
class WindowPolicy:
    """Sliding-window bound applied to a conversation log.

    Attributes:
        size: Maximum number of retained turns (must be > 0)
        includes_system: When True the bound covers the whole log, a seeded
            system turn included. When False the system turn is kept aside
            and only the most recent ``size`` other turns are retained.
    """

    size: int = 10
    includes_system: bool = False

    def apply(self, turns: list[Turn]) -> list[Turn]:
        """Return the turns that survive this policy, oldest first."""
        if self.includes_system:
            return turns[-self.size:]

        system_turns = [t for t in turns if t.is_system]
        others = [t for t in turns if not t.is_system]
        return system_turns + others[-self.size:]


# ============================================
# Tool Types
# ============================================


@dataclass
class ToolDefinition:
    """Definition of an available tool as advertised to the reasoning model.

    Attributes:
        name: Tool name (e.g., 'web_search')
        description: Human-readable description
        parameters: JSON Schema for parameters
        timeout_seconds: Maximum execution time (None = executor default)
    """

    name: str
    description: str
    parameters: dict[str, Any]
    timeout_seconds: Optional[float] = None

    def to_openai_format(self) -> dict[str, Any]:
        """Convert to OpenAI function calling format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

    def to_anthropic_format(self) -> dict[str, Any]:
        """Convert to Anthropic tool use format."""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.parameters,
        }


@dataclass
class ToolCall:
    """A tool call requested by the reasoning model.

    Attributes:
        id: Unique tool call identifier (for correlation)
        name: Tool name being called
        arguments: Arguments passed to the tool
        result: Result text from tool execution (set after execution)
        executed_at: When the tool was executed
    """

    name: str
    arguments: dict[str, Any]
    id: str = field(default_factory=lambda: f"call_{uuid.uuid4().hex[:24]}")
    result: Optional[str] = None
    executed_at: Optional[datetime] = None

    @property
    def is_executed(self) -> bool:
        """Check if this tool call has been executed."""
        return self.executed_at is not None


# ============================================
# Reasoning Exchange
# ============================================


@dataclass(frozen=True)
class ReasoningContext:
    """Everything a reasoning provider sees for one call.

    Attributes:
        instructions: Static system-level instructions
        input: Linear transcript of prior turns plus the new user prompt
        tool_calls: Tool exchanges already executed during this request
    """

    instructions: str
    input: str
    tool_calls: tuple[ToolCall, ...] = ()

    def with_tool_result(self, tool_call: ToolCall) -> ReasoningContext:
        """Return a new context that also carries an executed tool call."""
        if not tool_call.is_executed:
            raise ValueError(f"Tool call {tool_call.name} has not been executed")
        return replace(self, tool_calls=self.tool_calls + (tool_call,))


@dataclass(frozen=True)
class ReasoningResult:
    """Outcome of one reasoning call: a final answer or a tool request."""

    text: Optional[str] = None
    tool_call: Optional[ToolCall] = None
    model: Optional[str] = None

    @classmethod
    def answer(cls, text: Optional[str], model: Optional[str] = None) -> ReasoningResult:
        return cls(text=text or "", model=model)

    @classmethod
    def tool_request(cls, tool_call: ToolCall, model: Optional[str] = None) -> ReasoningResult:
        return cls(tool_call=tool_call, model=model)

    @property
    def is_tool_request(self) -> bool:
        return self.tool_call is not None


# ============================================
# Agent Run State
# ============================================


class AgentState(str, Enum):
    """Lifecycle of a single orchestrated request."""

    IDLE = "idle"
    CONTEXT_BUILT = "context_built"
    REASONING = "reasoning"
    TOOL_REQUESTED = "tool_requested"
    TOOL_EXECUTING = "tool_executing"
    ANSWERED = "answered"
    HISTORY_UPDATED = "history_updated"
    DONE = "done"
    FAILED = "failed"


# Allowed transitions; FAILED is reachable from every non-terminal state.
_TRANSITIONS: dict[AgentState, frozenset[AgentState]] = {
    AgentState.IDLE: frozenset({AgentState.CONTEXT_BUILT}),
    AgentState.CONTEXT_BUILT: frozenset({AgentState.REASONING}),
    AgentState.REASONING: frozenset({AgentState.TOOL_REQUESTED, AgentState.ANSWERED}),
    AgentState.TOOL_REQUESTED: frozenset({AgentState.TOOL_EXECUTING}),
    AgentState.TOOL_EXECUTING: frozenset({AgentState.REASONING}),
    AgentState.ANSWERED: frozenset({AgentState.HISTORY_UPDATED}),
    AgentState.HISTORY_UPDATED: frozenset({AgentState.DONE}),
    AgentState.DONE: frozenset(),
    AgentState.FAILED: frozenset(),
}


@dataclass
class AgentRun:
    """Per-request record of state transitions and tool activity."""

    conversation_id: str
    state: AgentState = AgentState.IDLE
    history: list[AgentState] = field(default_factory=lambda: [AgentState.IDLE])
    tool_calls: list[ToolCall] = field(default_factory=list)
    hops: int = 0
    started_at: datetime = field(default_factory=_utcnow)

    def transition(self, new_state: AgentState) -> None:
        """Move to ``new_state``, rejecting transitions the lifecycle forbids."""
        allowed = _TRANSITIONS[self.state]
        if new_state != AgentState.FAILED and new_state not in allowed:
            raise ValueError(f"Invalid agent transition {self.state.value} -> {new_state.value}")
        if self.state in (AgentState.DONE, AgentState.FAILED):
            raise ValueError(f"Agent run already finished in state {self.state.value}")
        self.state = new_state
        self.history.append(new_state)


@dataclass
class AgentReply:
    """Final reply returned by the orchestrator.

    Attributes:
        output: Answer text (never empty)
        conversation_id: Conversation the reply belongs to
        message_count: Number of stored turns after trimming
        timestamp: When the reply was produced (UTC)
        model: Model that produced the answer
        tool_calls: Names of tools executed while answering
        hops: Number of tool hops taken
    """

    output: str
    conversation_id: str
    message_count: int
    timestamp: datetime = field(default_factory=_utcnow)
    model: Optional[str] = None
    tool_calls: list[str] = field(default_factory=list)
    hops: int = 0


# ============================================
# Provider and Search Types
# ============================================


class ErrorType(str, Enum):
    """Classification of provider failures."""

    RECOVERABLE = "recoverable"  # Can retry
    FATAL = "fatal"  # Must abort
    TIMEOUT = "timeout"  # LLM timeout
    RATE_LIMIT = "rate_limit"  # Rate limited, back off


@dataclass(frozen=True)
class SearchResult:
    """One web search hit."""

    title: str
    snippet: str
    link: str
