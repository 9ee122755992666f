"""Shared fakes for agent tests."""

import asyncio
from typing import Optional

import pytest

from src.llmproxy.agent.domain.entities import (
    ReasoningContext,
    SearchResult,
    ToolDefinition,
)
from src.llmproxy.agent.domain.ports import IReasoningProvider, ISearchProvider
from src.llmproxy.agent.tools import SearchProviderError, ToolRegistry, create_web_search_tool


class ScriptedReasoningProvider(IReasoningProvider):
    """Returns queued results and records every call it receives."""

    def __init__(self, *results, delay: float = 0.0):
        self.results = list(results)
        self.delay = delay
        self.calls: list[tuple[ReasoningContext, list[ToolDefinition], Optional[str]]] = []
        self.allow_tool_calls: list[bool] = []

    @property
    def model_name(self) -> str:
        return "scripted-model"

    async def reason(self, context, tools, model=None, allow_tool_calls=True):
        self.calls.append((context, list(tools), model))
        self.allow_tool_calls.append(allow_tool_calls)
        if self.delay:
            await asyncio.sleep(self.delay)
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


class FakeSearchProvider(ISearchProvider):
    def __init__(self, results=None, error: Optional[Exception] = None, delay: float = 0.0):
        self.results = results or []
        self.error = error
        self.delay = delay
        self.queries: list[str] = []

    async def search(self, query):
        self.queries.append(query)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return list(self.results)


@pytest.fixture
def search_results():
    return [
        SearchResult(title="Python docs", snippet="Official docs", link="https://docs.python.org"),
        SearchResult(title="PEP 8", snippet="Style guide", link="https://peps.python.org/pep-0008/"),
        SearchResult(title="Real Python", snippet="Tutorials", link="https://realpython.com"),
        SearchResult(title="Fourth", snippet="Dropped", link="https://example.com/4"),
    ]


@pytest.fixture
def fake_search(search_results):
    return FakeSearchProvider(results=search_results)


@pytest.fixture
def registry(fake_search):
    return ToolRegistry([create_web_search_tool(fake_search)])


@pytest.fixture
def failing_search():
    return FakeSearchProvider(error=SearchProviderError("Google API error: 403 - quota exceeded"))


@pytest.fixture
def make_provider():
    """Factory for scripted reasoning providers."""
    return ScriptedReasoningProvider


@pytest.fixture
def make_search():
    """Factory for fake search providers."""
    return FakeSearchProvider
