"""
HTTP server for the Hackathon Scout application.

This module defines the FastAPI application that the Streamlit UI (or
any other client) talks to.  It can be run directly via uvicorn or
programmatically by calling the ``run`` function defined below.

Endpoints:

* **POST /api/search** – Run the scout for a research topic.  Accepts a
  JSON body ``{"query": str, "maxResults": int}`` (``maxResults`` is
  optional and defaults to 5) and returns a chunked
  ``application/x-ndjson`` body with one stream event per line.  The
  stream always ends with a ``complete`` or ``error`` event; failures
  after the response has started are reported in‑band.

* **GET /api/prompts** – Return a welcome message and a static list of
  example research topics.

* **GET /health** – Return a basic health status.  Intended for
  monitoring and readiness checks.

The application configures CORS to allow requests from any origin so
that the Streamlit UI running on a different port can call the API
without restriction.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Callable, Dict, Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator

from . import config
from .events import StreamEvent
from .relay import relay
from .scout import EXAMPLE_PROMPTS, WELCOME_MESSAGE, stream_search_events

logger = logging.getLogger(__name__)

EventSource = Callable[[str, int], AsyncIterator[StreamEvent]]

MAX_RESULTS_LIMIT = 50


class SearchRequest(BaseModel):
    """Body of a search request."""

    model_config = ConfigDict(populate_by_name=True)

    query: str
    max_results: Optional[int] = Field(default=None, alias='maxResults', ge=1, le=MAX_RESULTS_LIMIT)

    @field_validator('query')
    @classmethod
    def _query_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError('query must not be blank')
        return value


def get_event_source() -> EventSource:
    """Return the callable producing the event stream for a query.

    Exposed as a dependency so that tests or alternative runtimes can
    substitute their own source via ``app.dependency_overrides``.
    """
    return stream_search_events


# Create the FastAPI application
app = FastAPI(title="Hackathon Scout API", version="0.1.0")

# Configure CORS so that the Streamlit frontend can access the API
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event() -> None:
    """Log the effective configuration once the server starts."""
    logger.info(
        f"Hackathon Scout server startup complete (model={config.MODEL_NAME}, "
        f"max_steps={config.MAX_STEPS}, arxiv={config.ARXIV_API_URL})"
    )


@app.get("/health", response_model=Dict[str, Any])
async def health_check() -> Dict[str, Any]:
    """Return a basic health status."""
    return {
        "status": "healthy",
        "server": "HackathonScout",
    }


@app.get("/api/prompts", response_model=Dict[str, Any])
async def prompts() -> Dict[str, Any]:
    """Return the welcome message and example research topics."""
    return {
        "welcome": WELCOME_MESSAGE,
        "prompts": list(EXAMPLE_PROMPTS),
    }


@app.post("/api/search")
async def search(
    payload: SearchRequest,
    source: EventSource = Depends(get_event_source),
) -> StreamingResponse:
    """Stream the scout's progress for one research topic.

    Args:
        payload: The validated request body.
        source: Event source resolved through :func:`get_event_source`.

    Returns:
        A streaming response whose body is newline‑delimited JSON, one
        stream event per line, flushed as each event is produced.
    """
    max_results = payload.max_results or config.DEFAULT_MAX_RESULTS
    logger.info(f"Search requested: {payload.query!r} (max_results={max_results})")
    return StreamingResponse(
        relay(source(payload.query, max_results)),
        media_type="application/x-ndjson",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


def run(host: str = config.SERVER_HOST, port: int = config.SERVER_PORT) -> None:
    """Run the server using uvicorn.

    This helper wraps uvicorn to start the application.  It is
    intended for CLI use and test convenience.  In production you may
    prefer to run uvicorn directly or under a process manager.
    """
    import uvicorn  # type: ignore

    logger.info(f"Starting Hackathon Scout server on {host}:{port}")
    uvicorn.run(
        "hackathon_scout.backend.server:app",
        host=host,
        port=port,
        log_level="info",
        reload=False,
    )
