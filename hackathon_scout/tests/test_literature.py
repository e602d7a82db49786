"""
Tests for the ArXiv fetcher and the ArXiv feed parser.

ArXiv is never contacted: requests are answered by an
``httpx.MockTransport`` handler.
"""

from __future__ import annotations

import asyncio

import httpx
import pytest

from hackathon_scout.backend import config, literature, parsers


def _fetch(handler, query: str = 'diffusion models', max_results: int = 2) -> str:
    async def _run() -> str:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await literature.fetch_arxiv(query, max_results, client=client)

    return asyncio.run(_run())


def test_query_url_escapes_the_topic(monkeypatch) -> None:
    """The query is escaped like encodeURIComponent and searched in all fields."""
    monkeypatch.setattr(config, 'ARXIV_API_URL', 'http://export.arxiv.org/api/query')
    url = literature.build_query_url("LLM fine-tuning & RL (it's new)", 3)
    assert url == (
        "http://export.arxiv.org/api/query?search_query=all:LLM%20fine-tuning%20%26%20RL%20(it's%20new)"
        "&max_results=3&sortBy=relevance"
    )


def test_fetch_returns_raw_body_on_success(arxiv_feed) -> None:
    """A successful response body is returned unchanged."""
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text=arxiv_feed)

    assert _fetch(handler) == arxiv_feed
    assert len(seen) == 1
    assert seen[0].method == 'GET'
    assert seen[0].url.params['max_results'] == '2'
    assert seen[0].url.params['sortBy'] == 'relevance'
    assert seen[0].url.params['search_query'] == 'all:diffusion models'


def test_fetch_returns_placeholder_on_error_status() -> None:
    """A non‑success status degrades to a placeholder instead of raising."""
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(503, text='Service Unavailable')

    text = _fetch(handler)
    assert text == 'Error: ArXiv API returned status 503'
    assert literature.is_fetch_error(text)
    # No retries
    assert len(calls) == 1


def test_fetch_propagates_transport_errors() -> None:
    """Connection failures are raised for the runtime to report."""
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError('connection refused', request=request)

    with pytest.raises(httpx.ConnectError):
        _fetch(handler)


def test_parse_arxiv_feed_extracts_papers(arxiv_feed) -> None:
    """Entries become rows with cleaned titles, authors, years and links."""
    df = parsers.parse_arxiv_feed(arxiv_feed)
    assert list(df.columns) == parsers.CITATION_COLUMNS
    assert parsers.CITATION_COLUMNS == [
        'id', 'title', 'abstract', 'year', 'authors', 'journal', 'doi', 'keywords', 'url', 'pdf_url',
    ]
    assert len(df) == 2
    first = df.iloc[0]
    assert first['id'] == 'arxiv:2006.11239v2'
    assert first['title'] == 'Denoising Diffusion Probabilistic Models'
    assert first['abstract'].startswith('We present high quality')
    assert first['year'] == 2020
    assert first['authors'] == ['Jonathan Ho', 'Ajay Jain', 'Pieter Abbeel']
    assert first['pdf_url'] == 'http://arxiv.org/pdf/2006.11239v2'
    assert first['doi'] == '10.48550/arXiv.2006.11239'
    assert first['keywords'] == ['cs.LG', 'stat.ML']
    second = df.iloc[1]
    assert second['year'] == 2021
    assert second['doi'] == ''
    assert second['journal'] == 'arXiv'


def test_parse_arxiv_feed_handles_placeholders_and_empty_feeds() -> None:
    """Error placeholders and empty feeds give an empty frame."""
    assert parsers.parse_arxiv_feed('Error: ArXiv API returned status 503').empty
    assert parsers.parse_arxiv_feed('').empty
    empty = parsers.parse_arxiv_feed('<feed xmlns="http://www.w3.org/2005/Atom"><title>t</title></feed>')
    assert empty.empty
    assert list(empty.columns) == parsers.CITATION_COLUMNS


def test_normalize_year() -> None:
    """Years are extracted from dates, numbers and free text."""
    assert parsers.normalize_year('2020-06-19T17:24:44Z') == 2020
    assert parsers.normalize_year(1999) == 1999
    assert parsers.normalize_year(1500) is None
    assert parsers.normalize_year('') is None
    assert parsers.normalize_year(None) is None
    assert parsers.normalize_year('circa 2015 or so, unclear') == 2015
