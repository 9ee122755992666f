"""FastAPI dependency injection for the /gpt endpoints.

Lifecycle Management:
- OpenAI client: created at startup, shared across requests
- File store: created at startup, owns the generated/ directory
- JavaScript developer chat store: process-local, lives with the app

All are registered by the application lifespan and cleared at shutdown.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from fastapi import HTTPException, status
from openai import AsyncOpenAI

from ...agent.memory import InMemoryConversationStore
from ..storage import AudioFileValidator, GeneratedFileStore

logger = logging.getLogger(__name__)


@dataclass
class GptDependencies:
    """Container for /gpt dependencies. Injected at application startup."""

    openai_client: Optional[AsyncOpenAI] = None
    file_store: Optional[GeneratedFileStore] = None
    developer_chat_store: Optional[InMemoryConversationStore] = None
    server_url: str = "http://localhost:3000"
    audio_validator: AudioFileValidator = field(default_factory=AudioFileValidator)


_deps = GptDependencies()


def init_gpt_dependencies(
    openai_client: Optional[AsyncOpenAI],
    file_store: Optional[GeneratedFileStore],
    developer_chat_store: Optional[InMemoryConversationStore],
    server_url: str = "http://localhost:3000",
) -> None:
    """Register shared clients. Pass None values at shutdown."""
    _deps.openai_client = openai_client
    _deps.file_store = file_store
    _deps.developer_chat_store = developer_chat_store
    _deps.server_url = server_url


def get_openai_client() -> AsyncOpenAI:
    if _deps.openai_client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="OpenAI client not initialized",
        )
    return _deps.openai_client


def get_file_store() -> GeneratedFileStore:
    if _deps.file_store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="File store not initialized",
        )
    return _deps.file_store


def get_developer_chat_store() -> InMemoryConversationStore:
    if _deps.developer_chat_store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Developer chat not initialized",
        )
    return _deps.developer_chat_store


def get_server_url() -> str:
    return _deps.server_url


def get_audio_validator() -> AudioFileValidator:
    return _deps.audio_validator
