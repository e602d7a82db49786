"""
Hackathon scout agent.

The scout asks an OpenAI model to search ArXiv for a research topic
and to turn the papers it finds into hackathon project ideas.  The
model reaches ArXiv through the ``arxiv_search`` tool, which returns
the raw Atom XML, and is allowed a tool step followed by an answer
step.  :func:`stream_search_events` wires the runtime to a fresh
:class:`~.stream_transformer.StreamTransformer` and yields the
resulting stream events for one query.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Dict, Optional

from openai import AsyncOpenAI

from . import config
from .events import StreamEvent
from .literature import fetch_arxiv
from .runtime import Tool, ToolRuntime
from .stream_transformer import LITERATURE_TOOL_NAME, StreamTransformer

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = 'Hackathon Scout - Find research papers and get project ideas!'
EXAMPLE_PROMPTS = [
    'AI agents',
    'diffusion models',
    'reinforcement learning',
    'LLM fine-tuning',
    'computer vision',
]

SYSTEM_PROMPT = """You are a research paper scout that helps hackathon students find project ideas.

Use the arxiv_search tool to fetch papers before you answer. The tool returns raw ArXiv XML.

Given ArXiv API data, provide:

## Papers
For each paper, output:
- [Title](pdf_url)
  Authors: <first 3>
  Category: <ML|AI Agents|GenAI|CV|NLP|Other>
  <one-sentence summary (no label)>

## Hackathon Project Ideas
2-3 creative project ideas inspired by the papers. For each:
- Project name
- One sentence pitch
- Why it's good for a hackathon (doable in 24-48 hours)

Be direct and concise. Do not ask follow-up questions - this is a one-shot response."""


async def _arxiv_search(query: str, maxResults: Optional[int] = None) -> str:
    return await fetch_arxiv(query, maxResults or config.DEFAULT_MAX_RESULTS)


ARXIV_SEARCH_TOOL = Tool(
    name=LITERATURE_TOOL_NAME,
    description='Search ArXiv for papers by topic and return raw XML results.',
    parameters={
        'type': 'object',
        'properties': {
            'query': {'type': 'string', 'description': 'Search query for ArXiv'},
            'maxResults': {'type': 'integer', 'description': 'Maximum number of papers to return'},
        },
        'required': ['query'],
    },
    execute=_arxiv_search,
)


def build_prompt(query: str, max_results: int = config.DEFAULT_MAX_RESULTS) -> str:
    """Compose the user prompt for a research topic."""
    return (
        f'Research topic: "{query}". Use arxiv_search with maxResults={max_results} '
        f'and analyze the results.'
    )


def get_openai_client() -> AsyncOpenAI:
    """Create an async OpenAI client using the configured API key."""
    return AsyncOpenAI(api_key=config.resolve_api_key())


async def stream_search_events(
    query: str,
    max_results: int = config.DEFAULT_MAX_RESULTS,
    client: Any = None,
    model: Optional[str] = None,
) -> AsyncIterator[StreamEvent]:
    """Run the scout for ``query`` and yield its stream events in order.

    Args:
        query: Research topic entered by the user.
        max_results: Number of papers the model is told to request.
        client: Optional OpenAI‑compatible async client.  When omitted
            one is created from the environment; a missing API key is
            reported as an ``error`` event.
        model: Model name, defaulting to ``SCOUT_MODEL``.
    """
    model = model or config.MODEL_NAME
    logger.info(f"Hackathon Scout started: query={query!r} max_results={max_results} model={model}")

    async def _parts() -> AsyncIterator[Dict[str, Any]]:
        runtime = ToolRuntime(
            client if client is not None else get_openai_client(),
            model,
            [ARXIV_SEARCH_TOOL],
            max_steps=config.MAX_STEPS,
        )
        parts = runtime.stream(SYSTEM_PROMPT, build_prompt(query, max_results))
        try:
            async for part in parts:
                yield part
        finally:
            await parts.aclose()

    transformer = StreamTransformer(model)
    async for event in transformer.transform(_parts()):
        yield event
