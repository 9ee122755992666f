"""Conversation memory adapters."""
from .conversation import InMemoryConversationStore

__all__ = ["InMemoryConversationStore"]
