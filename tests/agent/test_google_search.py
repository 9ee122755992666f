"""Tests for the Google Custom Search client.

The aiohttp session is mocked; each ``session.get`` call consumes the next
scripted outcome (a JSON payload, a raw body or an exception).
"""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from src.llmproxy.agent.tools import (
    GoogleSearchClient,
    SearchProviderError,
    ToolRegistry,
    create_web_search_tool,
)
from src.llmproxy.agent.tools.google_search import (
    FETCH_ATTEMPTS,
    GOOGLE_SEARCH_URL,
    RETRY_BACKOFF_BUDGET,
)


def mock_response(payload=None, status=200, body=None):
    response = MagicMock()
    response.status = status
    if body is not None:
        response.json = AsyncMock(side_effect=json.JSONDecodeError("Expecting value", body, 0))
    else:
        response.json = AsyncMock(return_value=payload)
    response.__aenter__ = AsyncMock(return_value=response)
    response.__aexit__ = AsyncMock(return_value=None)
    return response


def mock_session(*outcomes):
    session = MagicMock()
    session.get = MagicMock(side_effect=list(outcomes))
    session.close = AsyncMock()
    return session


def make_client(session, max_results=3):
    return GoogleSearchClient(
        api_key="test-key",
        search_engine_id="test-cx",
        max_results=max_results,
        session=session,
    )


def items(n):
    return [
        {"title": f"T{i}", "snippet": f"S{i}", "link": f"https://example.com/{i}"}
        for i in range(n)
    ]


@pytest.fixture(autouse=True)
def no_sleep():
    with patch("src.llmproxy.api.resilience.asyncio.sleep", new=AsyncMock()):
        yield


class TestSearch:
    """Successful searches."""

    @pytest.mark.asyncio
    async def test_sends_key_cx_and_query(self):
        session = mock_session(mock_response({"items": items(1)}))

        await make_client(session).search("python asyncio")

        session.get.assert_called_once_with(
            GOOGLE_SEARCH_URL,
            params={"key": "test-key", "cx": "test-cx", "q": "python asyncio"},
            timeout=aiohttp.ClientTimeout(total=10.0, connect=5.0),
        )

    @pytest.mark.asyncio
    async def test_results_capped(self):
        session = mock_session(mock_response({"items": items(10)}))

        results = await make_client(session).search("python")

        assert [r.title for r in results] == ["T0", "T1", "T2"]
        assert results[0].snippet == "S0"
        assert results[0].link == "https://example.com/0"

    @pytest.mark.asyncio
    async def test_no_items(self):
        session = mock_session(mock_response({"kind": "customsearch#search"}))
        assert await make_client(session).search("asdkjaslkdj123") == []

    @pytest.mark.asyncio
    async def test_missing_fields_default_to_empty(self):
        session = mock_session(mock_response({"items": [{"title": "Only"}]}))

        results = await make_client(session).search("x")

        assert results[0].snippet == ""
        assert results[0].link == ""


class TestSearchErrors:
    """Failures surface as SearchProviderError."""

    @pytest.mark.asyncio
    async def test_error_payload(self):
        body = {"error": {"code": 400, "message": "API key not valid."}}
        session = mock_session(mock_response(body, status=400))

        with pytest.raises(SearchProviderError) as exc_info:
            await make_client(session).search("python")

        assert exc_info.value.message == "Google API error: 400 - API key not valid."
        assert exc_info.value.service == "google_search"
        assert session.get.call_count == 1

    @pytest.mark.asyncio
    async def test_connection_errors_are_retried(self):
        session = mock_session(*[aiohttp.ClientConnectionError("connection reset")] * 3)

        with pytest.raises(SearchProviderError) as exc_info:
            await make_client(session).search("python")

        assert exc_info.value.message.startswith("Google API request failed:")
        assert session.get.call_count == 3

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failure(self):
        session = mock_session(
            aiohttp.ClientConnectionError("connection reset"),
            mock_response({"items": items(1)}),
        )

        results = await make_client(session).search("python")

        assert len(results) == 1
        assert session.get.call_count == 2

    @pytest.mark.asyncio
    async def test_non_json_response_not_retried(self):
        session = mock_session(mock_response(status=502, body="<html>Bad gateway</html>"))

        with pytest.raises(SearchProviderError, match="HTTP 502"):
            await make_client(session).search("python")

        assert session.get.call_count == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [None, [], "quota", 42])
    async def test_non_object_payload(self, payload):
        session = mock_session(mock_response(payload))

        with pytest.raises(SearchProviderError, match=r"unexpected payload \(HTTP 200\)"):
            await make_client(session).search("python")

        assert session.get.call_count == 1

    @pytest.mark.asyncio
    async def test_empty_body_becomes_tool_text(self):
        registry = ToolRegistry(
            [create_web_search_tool(make_client(mock_session(mock_response(None))))]
        )

        text = await registry.invoke("web_search", {"query": "x"})

        assert text == (
            'Error searching for "x": Google API returned an unexpected payload (HTTP 200)'
        )

    @pytest.mark.asyncio
    async def test_timeouts_are_retried_then_reported(self):
        session = mock_session(*[asyncio.TimeoutError()] * 3)

        with pytest.raises(SearchProviderError, match="Google API request failed"):
            await make_client(session).search("python")

        assert session.get.call_count == 3


class TestAttemptTimeout:
    """Per-attempt timeouts derived from the tool deadline."""

    @pytest.mark.parametrize("deadline", [5.0, 20.0, 60.0])
    def test_all_attempts_fit_inside_deadline(self, deadline):
        per_attempt = GoogleSearchClient.attempt_timeout_within(deadline)
        assert per_attempt > 0
        assert FETCH_ATTEMPTS * per_attempt + RETRY_BACKOFF_BUDGET < deadline

    def test_short_timeout_caps_connect(self):
        session = mock_session(mock_response({"items": []}))
        client = GoogleSearchClient("k", "cx", timeout=2.0, session=session)

        assert client._request_timeout == aiohttp.ClientTimeout(total=2.0, connect=2.0)


class TestSessionLifecycle:

    @pytest.mark.asyncio
    async def test_close_leaves_injected_session_open(self):
        session = mock_session()

        await make_client(session).close()

        session.close.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_owned_session_created_lazily_and_closed(self):
        session = mock_session(mock_response({"items": []}))

        with patch("aiohttp.ClientSession", return_value=session) as session_cls:
            client = GoogleSearchClient("k", "cx")
            session_cls.assert_not_called()

            await client.search("python")
            await client.close()

        session_cls.assert_called_once()
        session.close.assert_awaited_once()
