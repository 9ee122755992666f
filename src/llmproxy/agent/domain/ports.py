"""
Port interfaces (abstract base classes) for the agent module.

These define the contracts that adapters must implement.
Following the Ports & Adapters (Hexagonal) architecture pattern.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .entities import (
        ReasoningContext,
        ReasoningResult,
        SearchResult,
        ToolDefinition,
        Turn,
    )


# ============================================
# Conversation Store Interface
# ============================================


class IConversationStore(ABC):
    """Interface for bounded, per-conversation turn logs."""

    @abstractmethod
    async def get_history(self, conversation_id: str) -> list[Turn]:
        """Return a copy of the stored turns, oldest first.

        An unseen conversation yields an empty list; this never raises.
        """
        pass

    @abstractmethod
    async def append_and_trim(
        self,
        conversation_id: str,
        new_turns: list[Turn],
        window_size: Optional[int] = None,
    ) -> list[Turn]:
        """Append turns in order, then trim the oldest beyond the window.

        Args:
            conversation_id: Conversation to update (created lazily)
            new_turns: Turns to append, in order
            window_size: Override for the configured window size

        Returns:
            The retained turns after trimming

        Raises:
            InvalidArgumentError: If window_size is not a positive integer
        """
        pass


# ============================================
# Reasoning Provider Interface
# ============================================


class IReasoningProvider(ABC):
    """Interface for tool-capable reasoning models (GPT, Claude).

    Implementations translate a ReasoningContext into the provider's
    message format and return either a final answer or a single tool
    request.
    """

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Return the default model identifier."""
        pass

    @abstractmethod
    async def reason(
        self,
        context: ReasoningContext,
        tools: list[ToolDefinition],
        model: Optional[str] = None,
        allow_tool_calls: bool = True,
    ) -> ReasoningResult:
        """Run one reasoning step.

        Args:
            context: Instructions, transcript and executed tool calls
            tools: Tools the model may request (empty = none offered)
            model: Per-request model override
            allow_tool_calls: When False the tools stay declared for replayed
                tool exchanges but the model must not call any

        Returns:
            ReasoningResult holding either answer text or a tool request

        Raises:
            LLMProviderError: If the provider call fails
        """
        pass

    async def close(self) -> None:
        """Release underlying HTTP clients."""
        return None


# ============================================
# Search Provider Interface
# ============================================


class ISearchProvider(ABC):
    """Interface for web search backends."""

    @abstractmethod
    async def search(self, query: str) -> list[SearchResult]:
        """Return ranked results for ``query`` (possibly empty).

        Raises:
            SearchProviderError: If the backend reports an error
        """
        pass
