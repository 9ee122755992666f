"""
Pydantic schemas for the developer agent API.

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# =============================================================================
# Constants
# =============================================================================

MAX_PROMPT_LENGTH = 10000


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Developer Agent Schemas
# =============================================================================


class DeveloperAgentRequest(CamelModel):
    """Request to the developer agent.

    Blank prompts and conversation ids pass schema validation and are
    rejected by the orchestrator with an InvalidArgument error.
    """

    prompt: str = Field(..., max_length=MAX_PROMPT_LENGTH)
    conversation_id: str
    model: Optional[str] = None
    tools: Optional[list[str]] = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "prompt": "How do I debounce an input handler in React?",
                "conversationId": "c1",
            }
        },
    )


class DeveloperAgentResponse(CamelModel):
    """Agent answer plus conversation bookkeeping."""

    output: str
    conversation_id: str
    message_count: int
    timestamp: datetime


class AgentErrorDetail(BaseModel):
    """Body placed under ``detail`` for agent errors."""

    error: str
    message: str
