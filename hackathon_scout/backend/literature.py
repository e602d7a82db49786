"""
ArXiv literature fetcher.

ArXiv provides free access to research paper metadata through a simple
Atom API.  :func:`fetch_arxiv` issues a single query against that API
and returns the raw XML body untouched so that the model can read it
directly.  The fetcher never retries and never paginates.

A non‑success HTTP status does not raise.  Instead a short placeholder
document naming the status code is returned and handed to the model,
which is expected to mention the failure in its analysis.  Transport
errors (DNS failures, timeouts, refused connections) are raised as
``httpx.HTTPError`` and are reported by the model runtime as tool
errors.
"""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import quote

import httpx

from . import config

logger = logging.getLogger(__name__)

FETCH_ERROR_PREFIX = 'Error: ArXiv API returned status '

# Characters left unescaped by JavaScript's encodeURIComponent
_URI_COMPONENT_SAFE = "-_.!~*'()"


def build_query_url(query: str, max_results: int = config.DEFAULT_MAX_RESULTS) -> str:
    """Return the ArXiv query URL for ``query`` capped at ``max_results`` papers."""
    escaped = quote(query, safe=_URI_COMPONENT_SAFE)
    return (
        f"{config.ARXIV_API_URL}?search_query=all:{escaped}"
        f"&max_results={int(max_results)}&sortBy=relevance"
    )


def is_fetch_error(text: str) -> bool:
    """Return True if ``text`` is the placeholder produced for a failed request."""
    return text.startswith(FETCH_ERROR_PREFIX)


async def fetch_arxiv(
    query: str,
    max_results: int = config.DEFAULT_MAX_RESULTS,
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    """Fetch papers matching ``query`` from ArXiv.

    Args:
        query: Free‑text research topic.  It is escaped and searched in
            all ArXiv fields.
        max_results: Maximum number of entries ArXiv should return.
        client: Optional shared ``httpx.AsyncClient``.  When omitted a
            short‑lived client is created for this single request.

    Returns:
        The raw Atom XML body, or the placeholder
        ``"Error: ArXiv API returned status <code>"`` when ArXiv answers
        with a non‑success status.
    """
    url = build_query_url(query, max_results)
    logger.info(f"Querying ArXiv for {query!r} (max_results={max_results})")
    if client is not None:
        response = await client.get(url)
    else:
        async with httpx.AsyncClient(timeout=config.ARXIV_TIMEOUT) as own_client:
            response = await own_client.get(url)
    if not response.is_success:
        logger.warning(f"ArXiv API returned status {response.status_code} for {query!r}")
        return f"{FETCH_ERROR_PREFIX}{response.status_code}"
    return response.text
