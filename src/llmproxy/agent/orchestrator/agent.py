"""
Agent Orchestrator.

Main orchestration logic for the developer agent. Coordinates:
- Conversation history retrieval and bounded updates
- Reasoning calls with the offered tools
- Tool execution with a bounded number of hops
- Deadlines for reasoning and tool calls
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from ..domain.entities import (
    AgentReply,
    AgentRun,
    AgentState,
    ErrorType,
    ReasoningContext,
    ReasoningResult,
    ToolDefinition,
    Turn,
)
from ..domain.exceptions import (
    AgentError,
    AgentExecutionFailedError,
    AgentTimeoutError,
    InvalidArgumentError,
)
from ..domain.ports import IConversationStore, IReasoningProvider
from ..providers.base import LLMProviderError
from ..tools.registry import ToolRegistry
from .prompt_builder import PromptBuilder
from .tool_executor import ToolExecutor

logger = logging.getLogger(__name__)

FALLBACK_ANSWER = "No valid response was received."


@dataclass
class AgentConfig:
    """Configuration for the agent orchestrator.

    Attributes:
        max_tool_hops: Tool round-trips allowed per request
        reasoning_timeout_seconds: Deadline for each reasoning call
        tool_timeout_seconds: Deadline for each tool call
        fallback_answer: Text stored and returned when the model answers empty
    """

    max_tool_hops: int = 1
    reasoning_timeout_seconds: float = 60.0
    tool_timeout_seconds: float = 20.0
    fallback_answer: str = FALLBACK_ANSWER

    def __post_init__(self):
        if self.max_tool_hops < 0:
            raise ValueError("max_tool_hops must be >= 0")
        if self.reasoning_timeout_seconds <= 0 or self.tool_timeout_seconds <= 0:
            raise ValueError("timeouts must be positive")


class AgentOrchestrator:
    """Runs one developer-agent request end to end.

    Request lifecycle:
    1. Validate prompt, conversation id and requested tools
    2. Read history and build the reasoning context
    3. Call the reasoning provider with the offered tools
    4. On a tool request, execute it and reason again (bounded hops)
    5. Append the user/assistant pair to the store, trimming to the window
    6. Return an AgentReply

    The store is written only after a final answer, so a failed request
    leaves the conversation untouched.

    Usage:
        orchestrator = AgentOrchestrator(
            reasoning_provider=openai_provider,
            tool_registry=registry,
            conversation_store=store,
        )

        reply = await orchestrator.run("Explain closures", "c1")
    """

    def __init__(
        self,
        reasoning_provider: IReasoningProvider,
        tool_registry: ToolRegistry,
        conversation_store: IConversationStore,
        config: Optional[AgentConfig] = None,
        prompt_builder: Optional[PromptBuilder] = None,
    ):
        self.llm = reasoning_provider
        self.tools = tool_registry
        self.conversations = conversation_store
        self.config = config or AgentConfig()
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.tool_executor = ToolExecutor(
            tool_registry,
            default_timeout_seconds=self.config.tool_timeout_seconds,
        )

    async def run(
        self,
        prompt: str,
        conversation_id: str,
        model: Optional[str] = None,
        tools: Optional[list[str]] = None,
    ) -> AgentReply:
        """Answer ``prompt`` within ``conversation_id``.

        Args:
            prompt: User prompt (must not be blank)
            conversation_id: Conversation identifier (must not be blank)
            model: Optional model override for this request
            tools: Optional subset of registered tool names to offer;
                None offers every registered tool

        Returns:
            AgentReply with the answer and updated message count

        Raises:
            InvalidArgumentError: Blank input or invalid tool arguments
            UnknownToolError: Unregistered or non-offered tool name
            AgentTimeoutError: A reasoning or tool deadline expired
            AgentExecutionFailedError: Any other failure
        """
        _require_text(prompt, "prompt")
        _require_text(conversation_id, "conversation_id")
        offered = self.tools.subset(tools) if tools is not None else self.tools.list_tools()

        agent_run = AgentRun(conversation_id=conversation_id)
        try:
            return await self._run(agent_run, prompt, conversation_id, model, offered)
        except AgentError:
            self._transition(agent_run, AgentState.FAILED)
            raise
        except LLMProviderError as e:
            self._transition(agent_run, AgentState.FAILED)
            if e.error_type == ErrorType.TIMEOUT:
                raise AgentTimeoutError(str(e), stage="reasoning", cause=e) from e
            raise AgentExecutionFailedError(
                f"Failed to process developer request: {e}", cause=e
            ) from e
        except Exception as e:
            self._transition(agent_run, AgentState.FAILED)
            logger.exception(f"Unexpected error in agent run for {conversation_id}: {e}")
            raise AgentExecutionFailedError(
                f"Failed to process developer request: {e}", cause=e
            ) from e

    async def _run(
        self,
        agent_run: AgentRun,
        prompt: str,
        conversation_id: str,
        model: Optional[str],
        offered: list[ToolDefinition],
    ) -> AgentReply:
        history = await self.conversations.get_history(conversation_id)
        context = self.prompt_builder.build(history, prompt, conversation_id)
        self._transition(agent_run, AgentState.CONTEXT_BUILT)

        offered_names = [t.name for t in offered]

        while True:
            self._transition(agent_run, AgentState.REASONING)
            hops_left = agent_run.hops < self.config.max_tool_hops
            result = await self._reason(context, offered, model, allow_tool_calls=hops_left)

            if not result.is_tool_request:
                break

            if not hops_left:
                raise AgentExecutionFailedError(
                    f"Model requested tool '{result.tool_call.name}' after the "
                    f"tool hop budget ({self.config.max_tool_hops}) was spent"
                )

            self._transition(agent_run, AgentState.TOOL_REQUESTED)
            self._transition(agent_run, AgentState.TOOL_EXECUTING)
            tool_call = await self.tool_executor.execute_tool_call(
                result.tool_call, offered_names, conversation_id
            )
            agent_run.tool_calls.append(tool_call)
            agent_run.hops += 1
            context = context.with_tool_result(tool_call)

        self._transition(agent_run, AgentState.ANSWERED)
        output = result.text if result.text and result.text.strip() else self.config.fallback_answer

        retained = await self.conversations.append_and_trim(
            conversation_id,
            [Turn.user(prompt), Turn.assistant(output)],
        )
        self._transition(agent_run, AgentState.HISTORY_UPDATED)
        self._transition(agent_run, AgentState.DONE)

        logger.info(
            f"Agent answered {conversation_id} after {agent_run.hops} tool hop(s); "
            f"{len(retained)} turn(s) stored"
        )
        return AgentReply(
            output=output,
            conversation_id=conversation_id,
            message_count=len(retained),
            model=result.model or model or self.llm.model_name,
            tool_calls=[tc.name for tc in agent_run.tool_calls],
            hops=agent_run.hops,
        )

    async def _reason(
        self,
        context: ReasoningContext,
        tools: list[ToolDefinition],
        model: Optional[str],
        allow_tool_calls: bool = True,
    ) -> ReasoningResult:
        timeout = self.config.reasoning_timeout_seconds
        try:
            return await asyncio.wait_for(
                self.llm.reason(context, tools, model=model, allow_tool_calls=allow_tool_calls),
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"Reasoning call timed out after {timeout}s")
            raise AgentTimeoutError(
                f"Reasoning timed out after {timeout}s",
                stage="reasoning",
                cause=e,
            ) from e

    @staticmethod
    def _transition(agent_run: AgentRun, state: AgentState) -> None:
        if state == AgentState.FAILED and agent_run.state in (AgentState.DONE, AgentState.FAILED):
            return
        previous = agent_run.state
        agent_run.transition(state)
        logger.debug(
            f"[{agent_run.conversation_id}] {previous.value} -> {state.value}"
        )


def _require_text(value: object, field_name: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(f"The {field_name} cannot be empty.")
