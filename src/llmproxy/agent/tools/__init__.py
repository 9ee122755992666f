"""Agent tools: registry, web search tool and the Google search client."""
from .google_search import GoogleSearchClient, SearchProviderError
from .registry import Tool, ToolRegistry
from .web_search import WEB_SEARCH_TOOL_NAME, create_web_search_tool, format_results

__all__ = [
    "GoogleSearchClient",
    "SearchProviderError",
    "Tool",
    "ToolRegistry",
    "WEB_SEARCH_TOOL_NAME",
    "create_web_search_tool",
    "format_results",
]
