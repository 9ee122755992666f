"""
Prompt Builder for the developer agent.

Builds the ReasoningContext handed to a reasoning provider:
- Static instructions naming the assistant's role and the conversation
- A linear transcript of prior turns followed by the new user prompt
"""

from __future__ import annotations

import logging
from typing import Optional

from ..domain.entities import ReasoningContext, Turn

logger = logging.getLogger(__name__)

DEFAULT_INSTRUCTIONS = """You are an expert software development assistant.
Your role is to help developers with their technical queries,
providing clean code, best practices, and clear explanations.

If you don't have enough information to respond, search the web.

Conversation context: {conversation_id}"""


class PromptBuilder:
    """Builds reasoning contexts for the agent.

    Usage:
        builder = PromptBuilder()
        context = builder.build(history, "How do I debounce in JS?", "c1")
    """

    def __init__(self, instructions_template: Optional[str] = None):
        """Initialize the prompt builder.

        Args:
            instructions_template: Template with a ``{conversation_id}`` field
        """
        self.instructions_template = instructions_template or DEFAULT_INSTRUCTIONS

    def build_instructions(self, conversation_id: str) -> str:
        return self.instructions_template.format(conversation_id=conversation_id)

    @staticmethod
    def build_transcript(history: list[Turn], prompt: str) -> str:
        """Serialize prior turns as ``role: content`` lines plus the new prompt.

        System turns are excluded; the instructions already carry that role.
        """
        lines = [
            f"{turn.role.value}: {turn.content}"
            for turn in history
            if not turn.is_system
        ]
        lines.append(f"user: {prompt}")
        return "\n".join(lines)

    def build(
        self,
        history: list[Turn],
        prompt: str,
        conversation_id: str,
    ) -> ReasoningContext:
        """Build the initial reasoning context for a request.

        Args:
            history: Stored turns for the conversation, oldest first
            prompt: New user prompt
            conversation_id: Conversation identifier

        Returns:
            Immutable ReasoningContext with no tool calls yet
        """
        context = ReasoningContext(
            instructions=self.build_instructions(conversation_id),
            input=self.build_transcript(history, prompt),
        )
        logger.debug(
            f"Built context for {conversation_id}: {len(history)} prior turn(s), "
            f"{len(context.input)} chars"
        )
        return context
