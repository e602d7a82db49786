"""
Tests for the streaming HTTP client used by the Streamlit UI.
"""

from __future__ import annotations

import json

import httpx

from hackathon_scout.backend.events import (
    CompleteEvent,
    LLMStartEvent,
    TokenEvent,
    encode_event,
)
from hackathon_scout.frontend.client import ScoutClient
from hackathon_scout.frontend.reducer import COMPLETE, ERROR, ScoutReducer


def _client(handler) -> ScoutClient:
    return ScoutClient(base_url='http://scout.test', transport=httpx.MockTransport(handler))


def test_stream_search_folds_chunks_incrementally() -> None:
    """Each received chunk is fed to the reducer and yielded to the caller."""
    payload = b''.join(encode_event(e) for e in (
        LLMStartEvent(model='gpt-5', message='Analyzing with gpt-5...'),
        TokenEvent(content='Hello '),
        TokenEvent(content='world'),
        CompleteEvent(message='Analysis complete'),
    ))
    bodies = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        chunks = [payload[i:i + 10] for i in range(0, len(payload), 10)]
        return httpx.Response(200, content=iter(chunks),
                              headers={'content-type': 'application/x-ndjson'})

    reducer = ScoutReducer()
    with _client(handler) as client:
        snapshots = [state.response_text for state in client.stream_search('AI agents', 3, reducer)]

    assert bodies == [{'query': 'AI agents', 'maxResults': 3}]
    assert len(snapshots) > 2
    assert snapshots[-1] == 'Hello world'
    assert reducer.status == COMPLETE


def test_stream_search_reports_http_failures() -> None:
    """A non‑success status is a connection error, not a stream event."""
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={'detail': 'bad'})

    reducer = ScoutReducer()
    with _client(handler) as client:
        list(client.stream_search('x', 5, reducer))
    assert reducer.status == ERROR
    assert reducer.activities[-1].message == 'Search failed with HTTP status 422'


def test_stream_search_reports_unreachable_backend() -> None:
    """Transport errors end the search with an error status."""
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError('connection refused', request=request)

    reducer = ScoutReducer()
    with _client(handler) as client:
        list(client.stream_search('x', 5, reducer))
    assert reducer.status == ERROR
    assert reducer.activities[-1].message == 'Connection error: connection refused'


def test_stream_search_flags_truncated_streams() -> None:
    """A body that ends without a terminal event is treated as a dropped connection."""
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=encode_event(TokenEvent(content='partial')))

    reducer = ScoutReducer()
    with _client(handler) as client:
        list(client.stream_search('x', 5, reducer))
    assert reducer.response_text == 'partial'
    assert reducer.status == ERROR
    assert reducer.activities[-1].message == 'Connection closed before the search finished'


def test_get_prompts() -> None:
    """Example prompts are read from the backend."""
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == '/api/prompts'
        return httpx.Response(200, json={'welcome': 'hi', 'prompts': ['AI agents']})

    with _client(handler) as client:
        assert client.get_prompts() == {'welcome': 'hi', 'prompts': ['AI agents']}
