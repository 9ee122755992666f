"""
Google Custom Search client.

Thin async adapter over the Custom Search JSON API:

    GET https://www.googleapis.com/customsearch/v1?key=...&cx=...&q=...

Transport failures are retried with exponential backoff. An ``error``
object in the payload (bad key, quota exceeded, ...) or a body that is not a
JSON object is not retried and surfaces as SearchProviderError.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import aiohttp

from ...api.exceptions import NetworkError, UpstreamServiceError
from ...api.resilience import retry
from ..domain.entities import SearchResult
from ..domain.ports import ISearchProvider

logger = logging.getLogger(__name__)

GOOGLE_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"

FETCH_ATTEMPTS = 3
# Upper bound of the jittered sleeps between FETCH_ATTEMPTS attempts
RETRY_BACKOFF_BUDGET = 2.5


class SearchProviderError(UpstreamServiceError):
    """Raised when the search backend reports or causes a failure."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("service", "google_search")
        kwargs.setdefault("code", "SEARCH_ERROR")
        super().__init__(message, **kwargs)


class GoogleSearchClient(ISearchProvider):
    """Search provider backed by Google Custom Search.

    Usage:
        client = GoogleSearchClient(api_key="AIza...", search_engine_id="0123:abc")
        results = await client.search("fastapi lifespan")
        await client.close()

    Args:
        api_key: Google API key
        search_engine_id: Programmable Search Engine id (``cx``)
        max_results: Maximum number of results returned
        timeout: Total timeout of each request attempt in seconds
        session: Optional shared aiohttp session (not closed by this client)
    """

    def __init__(
        self,
        api_key: str,
        search_engine_id: str,
        max_results: int = 3,
        timeout: float = 10.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.api_key = api_key
        self.search_engine_id = search_engine_id
        self.max_results = max_results
        self.timeout = timeout
        self._request_timeout = aiohttp.ClientTimeout(total=timeout, connect=min(5.0, timeout))
        self._owns_session = session is None
        self._session = session

    def _get_session(self) -> aiohttp.ClientSession:
        # Created lazily so the session binds to the running event loop
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._request_timeout)
        return self._session

    async def search(self, query: str) -> list[SearchResult]:
        try:
            data = await self._fetch(query)
        except (NetworkError, asyncio.TimeoutError) as e:
            raise SearchProviderError(f"Google API request failed: {e}", cause=e) from e

        error = data.get("error")
        if error:
            code = error.get("code", "unknown") if isinstance(error, dict) else "unknown"
            message = error.get("message", "") if isinstance(error, dict) else str(error)
            raise SearchProviderError(f"Google API error: {code} - {message}")

        items = data.get("items") or []
        results = [
            SearchResult(
                title=item.get("title", ""),
                snippet=item.get("snippet", ""),
                link=item.get("link", ""),
            )
            for item in items[: self.max_results]
        ]
        logger.info(f"Google search returned {len(results)} result(s) for {query!r}")
        return results

    @staticmethod
    def attempt_timeout_within(deadline: float) -> float:
        """Per-attempt timeout that lets every retry finish before ``deadline``."""
        return max((deadline - RETRY_BACKOFF_BUDGET) * 0.9 / FETCH_ATTEMPTS, 0.1)

    @retry(max_attempts=FETCH_ATTEMPTS, initial_delay=0.5)
    async def _fetch(self, query: str) -> dict[str, Any]:
        params = {"key": self.api_key, "cx": self.search_engine_id, "q": query}
        try:
            async with self._get_session().get(
                GOOGLE_SEARCH_URL, params=params, timeout=self._request_timeout
            ) as response:
                try:
                    # Google reports errors as JSON with a 4xx status
                    data = await response.json(content_type=None)
                except ValueError as e:
                    raise SearchProviderError(
                        f"Google API returned a non-JSON response (HTTP {response.status})",
                        cause=e,
                    ) from e
                # An empty body decodes to None
                if not isinstance(data, dict):
                    raise SearchProviderError(
                        f"Google API returned an unexpected payload (HTTP {response.status})"
                    )
                return data
        except aiohttp.ClientError as e:
            raise NetworkError(
                f"{e.__class__.__name__}: {e}", service="google_search", cause=e
            ) from e

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None
