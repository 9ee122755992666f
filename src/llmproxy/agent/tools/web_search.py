"""The ``web_search`` tool offered to the developer agent."""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..domain.entities import SearchResult
from ..domain.ports import ISearchProvider
from .google_search import SearchProviderError
from .registry import Tool

logger = logging.getLogger(__name__)

WEB_SEARCH_TOOL_NAME = "web_search"
MAX_RESULTS = 3


class WebSearchArguments(BaseModel):
    model_config = ConfigDict(extra="forbid")

    query: str = Field(..., min_length=1, description="Search query")


def format_results(query: str, results: list[SearchResult]) -> str:
    """Render search hits as numbered text, or the no-results sentinel."""
    if not results:
        return f'No results found for "{query}".'

    body = "\n\n".join(
        f"{i}. {r.title}\n {r.snippet}\n {r.link}"
        for i, r in enumerate(results[:MAX_RESULTS], start=1)
    )
    return f'Search results for "{query}":\n\n{body}'


def create_web_search_tool(
    search_provider: ISearchProvider,
    timeout_seconds: Optional[float] = None,
) -> Tool:
    """Build the web_search tool around a search provider.

    Any search failure is returned to the model as text so it can answer
    without the results.
    """

    async def handler(args: WebSearchArguments) -> str:
        logger.info(f"Searching the web for: {args.query}")
        try:
            results = await search_provider.search(args.query)
        except SearchProviderError as e:
            logger.error(f"Web search failed for {args.query!r}: {e}")
            return f'Error searching for "{args.query}": {e.message}'
        except Exception as e:
            logger.exception(f"Unexpected web search failure for {args.query!r}: {e}")
            return f'Error searching for "{args.query}": {e}'
        return format_results(args.query, results)

    return Tool(
        name=WEB_SEARCH_TOOL_NAME,
        description="Search for information on the web using Google",
        arguments_model=WebSearchArguments,
        handler=handler,
        timeout_seconds=timeout_seconds,
    )
