"""
FastAPI Router for the developer agent.

Exposes the orchestrator over HTTP and maps agent error kinds to status
codes:

    InvalidArgument      -> 400
    UnknownTool          -> 400
    Timeout              -> 504
    AgentExecutionFailed -> 502
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from ...api.error_sanitizer import sanitize_error_message
from ..domain.exceptions import AgentError
from ..orchestrator import AgentOrchestrator
from .schemas import AgentErrorDetail, DeveloperAgentRequest, DeveloperAgentResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sam-agent", tags=["agent"])


# =============================================================================
# Dependencies
# =============================================================================


class AgentDependencies:
    """Container for agent dependencies.

    Injected at application startup.
    """

    orchestrator: Optional[AgentOrchestrator] = None


_deps = AgentDependencies()


def create_agent_dependencies(orchestrator: Optional[AgentOrchestrator]) -> None:
    """Initialize agent dependencies.

    Call this at application startup; pass None at shutdown.

    Args:
        orchestrator: The agent orchestrator
    """
    _deps.orchestrator = orchestrator


def get_orchestrator() -> AgentOrchestrator:
    """Get the agent orchestrator dependency."""
    if not _deps.orchestrator:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Agent not initialized",
        )
    return _deps.orchestrator


# =============================================================================
# REST Endpoints
# =============================================================================


@router.post(
    "/developer-agent",
    response_model=DeveloperAgentResponse,
    responses={
        400: {"description": "Invalid argument or unknown tool"},
        502: {"description": "Agent execution failed"},
        503: {"description": "Agent not initialized"},
        504: {"description": "Reasoning or tool deadline expired"},
    },
)
async def developer_agent(
    request: DeveloperAgentRequest,
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> DeveloperAgentResponse:
    """Ask the developer agent a question within a conversation."""
    try:
        reply = await orchestrator.run(
            prompt=request.prompt,
            conversation_id=request.conversation_id,
            model=request.model,
            tools=request.tools,
        )
    except AgentError as e:
        logger.error(f"Developer agent failed for {request.conversation_id}: {e}")
        detail = AgentErrorDetail(
            error=e.code,
            message=sanitize_error_message(e.message),
        )
        raise HTTPException(status_code=e.status_code, detail=detail.model_dump()) from e

    return DeveloperAgentResponse(
        output=reply.output,
        conversation_id=reply.conversation_id,
        message_count=reply.message_count,
        timestamp=reply.timestamp,
    )
