"""HTTP surface of the /gpt pass-through endpoints."""
from .dependencies import init_gpt_dependencies
from .router import router

__all__ = ["init_gpt_dependencies", "router"]
