"""LLM proxy backend: OpenAI pass-through endpoints and a developer-assistant agent."""

__version__ = "1.0.0"
