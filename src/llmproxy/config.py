"""Environment-driven settings for the LLM proxy.

Values are read from the process environment after loading a local
``.env`` file, if present.

Example:
    >>> settings = Settings.from_env()
    >>> settings.agent_history_window
    10
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .api.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

REASONING_PROVIDERS = ("openai", "anthropic")


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}", cause=e) from e


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}", cause=e) from e


@dataclass
class Settings:
    """Application settings.

    Attributes:
        openai_api_key: Key for OpenAI (pass-through endpoints and GPT reasoning)
        anthropic_api_key: Key for Anthropic (Claude reasoning)
        reasoning_provider: "openai" or "anthropic"
        agent_model: Default model for the developer agent on OpenAI
        anthropic_model: Default model for the developer agent on Anthropic
        google_api_key: Google Custom Search API key
        google_search_engine_id: Programmable Search Engine id (cx)
        server_url: Public base URL used in generated image links
        generated_dir: Directory for generated images, audio and uploads
        agent_history_window: Turns retained per agent conversation
        agent_max_tool_hops: Tool round-trips per agent request
        agent_reasoning_timeout: Deadline per reasoning call (seconds)
        agent_tool_timeout: Deadline per tool call (seconds)
        cors_origins: Allowed CORS origins
        log_level: Root logging level
        port: Port for the uvicorn entry point
    """

    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    reasoning_provider: str = "openai"
    agent_model: str = "gpt-4o-mini"
    anthropic_model: str = "claude-sonnet-4-5"
    google_api_key: Optional[str] = None
    google_search_engine_id: Optional[str] = None
    server_url: str = "http://localhost:3000"
    generated_dir: Path = Path("generated")
    agent_history_window: int = 10
    agent_max_tool_hops: int = 1
    agent_reasoning_timeout: float = 60.0
    agent_tool_timeout: float = 20.0
    cors_origins: list[str] = field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:5173"]
    )
    log_level: str = "INFO"
    port: int = 3000

    def __post_init__(self):
        if self.reasoning_provider not in REASONING_PROVIDERS:
            raise ConfigurationError(
                f"REASONING_PROVIDER must be one of {', '.join(REASONING_PROVIDERS)}, "
                f"got {self.reasoning_provider!r}"
            )
        if self.agent_history_window <= 0:
            raise ConfigurationError("AGENT_HISTORY_WINDOW must be a positive integer")
        if self.agent_max_tool_hops < 0:
            raise ConfigurationError("AGENT_MAX_TOOL_HOPS must be zero or more")
        if self.agent_reasoning_timeout <= 0 or self.agent_tool_timeout <= 0:
            raise ConfigurationError("Agent timeouts must be positive")

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        """Build settings from environment variables.

        Raises:
            ConfigurationError: If a value is present but malformed
        """
        if dotenv:
            load_dotenv()

        origins = os.getenv("CORS_ORIGINS")
        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY") or None,
            reasoning_provider=os.getenv("REASONING_PROVIDER", "openai").strip().lower(),
            agent_model=os.getenv("AGENT_MODEL", "gpt-4o-mini"),
            anthropic_model=os.getenv("ANTHROPIC_MODEL", "claude-sonnet-4-5"),
            google_api_key=os.getenv("GOOGLE_API_KEY") or None,
            google_search_engine_id=os.getenv("GOOGLE_SEARCH_ENGINE_ID") or None,
            server_url=os.getenv("SERVER_URL", "http://localhost:3000"),
            generated_dir=Path(os.getenv("GENERATED_DIR", "generated")),
            agent_history_window=_int_env("AGENT_HISTORY_WINDOW", 10),
            agent_max_tool_hops=_int_env("AGENT_MAX_TOOL_HOPS", 1),
            agent_reasoning_timeout=_float_env("AGENT_REASONING_TIMEOUT", 60.0),
            agent_tool_timeout=_float_env("AGENT_TOOL_TIMEOUT", 20.0),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()]
            if origins
            else ["http://localhost:3000", "http://localhost:5173"],
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            port=_int_env("PORT", 3000),
        )

    @property
    def search_enabled(self) -> bool:
        return bool(self.google_api_key and self.google_search_engine_id)

    def missing_agent_keys(self) -> list[str]:
        """Names of env keys the configured reasoning provider still needs."""
        if self.reasoning_provider == "anthropic":
            return [] if self.anthropic_api_key else ["ANTHROPIC_API_KEY"]
        return [] if self.openai_api_key else ["OPENAI_API_KEY"]
