"""
HTTP client used by the Streamlit UI to talk to the scout backend.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, Optional

import httpx

from hackathon_scout.backend import config

from .reducer import ScoutReducer

logger = logging.getLogger(__name__)


class ScoutClient:
    """Thin wrapper around ``httpx.Client`` for the scout API.

    Args:
        base_url: Backend base URL, defaulting to ``SCOUT_API_URL``.
        timeout: Connect/read timeout in seconds.  The read timeout
            applies between chunks, not to the whole stream.
        transport: Optional custom transport, mainly for tests.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 120.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or config.API_URL).rstrip('/')
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ScoutClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def get_prompts(self) -> Dict[str, Any]:
        """Return the welcome message and example prompts from the backend."""
        response = self._client.get('/api/prompts')
        response.raise_for_status()
        return response.json()

    def stream_search(
        self,
        query: str,
        max_results: int,
        reducer: ScoutReducer,
    ) -> Iterator[ScoutReducer]:
        """Run a search and fold the streamed events into ``reducer``.

        The reducer is reset first and yielded after every received
        chunk so the caller can re‑render incrementally.  Connection
        failures and non‑success statuses are recorded through
        :meth:`ScoutReducer.connection_error`.
        """
        reducer.start()
        body = {'query': query, 'maxResults': max_results}
        try:
            with self._client.stream('POST', '/api/search', json=body) as response:
                if not response.is_success:
                    response.read()
                    logger.warning(f"Search request failed with status {response.status_code}")
                    reducer.connection_error(f"Search failed with HTTP status {response.status_code}")
                    yield reducer
                    return
                for chunk in response.iter_bytes():
                    reducer.feed(chunk)
                    yield reducer
                    if reducer.is_terminal:
                        break
        except httpx.HTTPError as e:
            logger.error(f"Connection to scout backend failed: {e}")
            reducer.connection_error(f"Connection error: {e}")
            yield reducer
            return
        reducer.close()
        if not reducer.is_terminal:
            reducer.connection_error('Connection closed before the search finished')
        yield reducer
