"""HTTP surface of the developer agent."""
from .router import create_agent_dependencies, get_orchestrator, router

__all__ = ["create_agent_dependencies", "get_orchestrator", "router"]
