"""FastAPI application for the LLM proxy.

This is the main entry point for the API server.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from openai import AsyncOpenAI

from .agent.api import create_agent_dependencies
from .agent.api import router as agent_router
from .agent.domain.entities import WindowPolicy
from .agent.domain.ports import IReasoningProvider
from .agent.memory import InMemoryConversationStore
from .agent.orchestrator import AgentConfig, AgentOrchestrator
from .agent.providers import AnthropicProvider, LLMProviderConfig, OpenAIProvider
from .agent.tools import GoogleSearchClient, ToolRegistry, create_web_search_tool
from .config import Settings
from .gpt.api import init_gpt_dependencies
from .gpt.api import router as gpt_router
from .gpt.storage import GeneratedFileStore
from .gpt.use_cases import create_developer_chat_store

settings = Settings.from_env()

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _build_reasoning_provider(
    settings: Settings,
    openai_client: Optional[AsyncOpenAI],
) -> Optional[IReasoningProvider]:
    """Create the configured reasoning provider, or None if keys are missing."""
    missing = settings.missing_agent_keys()
    if missing:
        logger.warning(f"Developer agent disabled: missing {', '.join(missing)}")
        return None

    if settings.reasoning_provider == "anthropic":
        config = LLMProviderConfig(
            api_key=settings.anthropic_api_key,
            model=settings.anthropic_model,
            timeout=settings.agent_reasoning_timeout,
        )
        logger.info(f"Using Anthropic provider with model: {config.model}")
        return AnthropicProvider(config)

    config = LLMProviderConfig(
        api_key=settings.openai_api_key,
        model=settings.agent_model,
        timeout=settings.agent_reasoning_timeout,
    )
    logger.info(f"Using OpenAI provider with model: {config.model}")
    return OpenAIProvider(config, client=openai_client)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager.

    Handles startup and shutdown events:
    - Startup: OpenAI client, file store, search client, agent orchestrator
    - Shutdown: close clients in reverse order
    """
    logger.info("Starting LLM proxy API...")

    openai_client: Optional[AsyncOpenAI] = None
    if settings.openai_api_key:
        openai_client = AsyncOpenAI(api_key=settings.openai_api_key)
    else:
        logger.warning("OPENAI_API_KEY not configured - /gpt endpoints will return 503")

    file_store = GeneratedFileStore(settings.generated_dir)
    file_store.ensure_dirs()
    init_gpt_dependencies(
        openai_client=openai_client,
        file_store=file_store,
        developer_chat_store=create_developer_chat_store(settings.agent_history_window),
        server_url=settings.server_url,
    )

    registry = ToolRegistry()
    search_client: Optional[GoogleSearchClient] = None
    if settings.search_enabled:
        search_client = GoogleSearchClient(
            api_key=settings.google_api_key,
            search_engine_id=settings.google_search_engine_id,
            timeout=GoogleSearchClient.attempt_timeout_within(settings.agent_tool_timeout),
        )
        registry.register(create_web_search_tool(search_client))
    else:
        logger.warning(
            "GOOGLE_API_KEY / GOOGLE_SEARCH_ENGINE_ID not configured - web_search disabled"
        )

    provider = _build_reasoning_provider(settings, openai_client)
    if provider:
        orchestrator = AgentOrchestrator(
            reasoning_provider=provider,
            tool_registry=registry,
            conversation_store=InMemoryConversationStore(
                policy=WindowPolicy(size=settings.agent_history_window, includes_system=False),
            ),
            config=AgentConfig(
                max_tool_hops=settings.agent_max_tool_hops,
                reasoning_timeout_seconds=settings.agent_reasoning_timeout,
                tool_timeout_seconds=settings.agent_tool_timeout,
            ),
        )
        create_agent_dependencies(orchestrator)
        logger.info(f"Developer agent initialized with tools: {registry.names()}")

    yield

    # Shutdown (reverse order of initialization)
    logger.info("Shutting down LLM proxy API...")
    create_agent_dependencies(None)
    init_gpt_dependencies(None, None, None, settings.server_url)

    if provider:
        await provider.close()
    if search_client:
        await search_client.close()
    await file_store.close()
    if openai_client:
        await openai_client.close()
    logger.info("Clients closed")


# Create FastAPI application
app = FastAPI(
    title="LLM Proxy API",
    description="""
    Backend for OpenAI-powered assistants.

    ## Features
    - **Developer agent**: conversational assistant that can search the web
    - **Text**: orthography checks, translation, pros/cons, basic prompts
    - **Audio**: text-to-speech and transcription
    - **Images**: generation, masked edits and variations
    """,
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)

# Include routers
app.include_router(agent_router)
app.include_router(gpt_router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "LLM Proxy API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health")
async def health():
    """Global health check."""
    return {"status": "healthy"}


# Entry point for running with uvicorn
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.llmproxy.app:app",
        host="0.0.0.0",
        port=settings.port,
        reload=True,
    )
