"""
Transformation of the model runtime's part stream into stream events.

The model‑calling runtime (see :mod:`.runtime`) produces a heterogeneous
stream of dictionaries discriminated by their ``type`` key: lifecycle
markers, tool‑call begin/end pairs, text deltas and errors.  A
:class:`StreamTransformer` folds that stream, one part at a time and in
arrival order, into the canonical events defined in :mod:`.events`.

The transformer keeps two flags per request.  ``llm_started`` makes
``llm_start`` idempotent: it is emitted once, the first time any
generation‑beginning part is seen, and always before the event built
from that same part.  ``finished`` is set by the first terminal event;
everything after it is discarded.  Unknown part types are dropped so
that newer runtimes cannot break older clients.
"""

from __future__ import annotations

import logging
import re
from typing import Any, AsyncIterable, AsyncIterator, List, Optional

from .events import (
    CompleteEvent,
    ErrorEvent,
    LLMStartEvent,
    StreamEvent,
    TokenEvent,
    ToolCallEvent,
    ToolResultEvent,
)
from .literature import is_fetch_error

logger = logging.getLogger(__name__)

LITERATURE_TOOL_NAME = 'arxiv_search'
COMPLETE_MESSAGE = 'Analysis complete'
INCOMPLETE_STREAM_MESSAGE = 'Error: model stream ended before completion'

# Part types that mean the model has started producing output
GENERATION_START_PARTS = frozenset({'start', 'start-step', 'text-start', 'text-delta', 'tool-call'})

_ENTRY_TAG = '<entry>'
_TITLE_RE = re.compile(r'<title>([^<]+)</title>')
_WHITESPACE_RE = re.compile(r'\s+')
_MAX_LISTED_TITLES = 3


def summarize_tool_result(tool: str, output: Any) -> str:
    """Build the display message for a finished tool call.

    ArXiv search results are summarised from the raw Atom XML: the
    number of ``<entry>`` elements gives the paper count and the first
    three paper titles are listed.  The first ``<title>`` in the feed
    belongs to the feed itself and is skipped.  Any other tool, a
    non‑text output or the fetcher's error placeholder falls back to
    ``"<tool> complete"``.
    """
    if tool != LITERATURE_TOOL_NAME or not isinstance(output, str) or is_fetch_error(output):
        return f"{tool} complete"
    paper_count = output.count(_ENTRY_TAG)
    titles = _TITLE_RE.findall(output)[1:1 + _MAX_LISTED_TITLES]
    titles = [_WHITESPACE_RE.sub(' ', t.strip()) for t in titles]
    if titles:
        return f"Found {paper_count} papers. Top: {' • '.join(titles)}"
    return f"Found {paper_count} papers"


def _tool_name(part: dict) -> str:
    name = part.get('toolName')
    return 'tool' if name is None else str(name)


def _tool_call_id(part: dict) -> Optional[str]:
    call_id = part.get('toolCallId')
    return call_id if isinstance(call_id, str) else None


class StreamTransformer:
    """Stateful, single‑pass converter from runtime parts to stream events.

    One instance serves exactly one request.  :meth:`process` handles a
    single part and returns the events it produces (zero, one or two);
    :meth:`transform` drives a whole asynchronous part stream.
    """

    def __init__(self, model: str) -> None:
        self.model = model
        self.llm_started = False
        self.finished = False

    def process(self, part: Any) -> List[StreamEvent]:
        if self.finished or not isinstance(part, dict):
            return []
        kind = part.get('type')
        if not isinstance(kind, str):
            return []
        events: List[StreamEvent] = []

        if kind in GENERATION_START_PARTS and not self.llm_started:
            self.llm_started = True
            events.append(LLMStartEvent(model=self.model, message=f"Analyzing with {self.model}..."))

        if kind == 'tool-call':
            tool = _tool_name(part)
            events.append(ToolCallEvent(
                tool=tool,
                tool_call_id=_tool_call_id(part),
                input=part.get('input'),
                message=f"Calling {tool}...",
            ))
        elif kind == 'tool-result':
            tool = _tool_name(part)
            output = part.get('output')
            events.append(ToolResultEvent(
                tool=tool,
                tool_call_id=_tool_call_id(part),
                input=part.get('input'),
                output=output,
                message=summarize_tool_result(tool, output),
            ))
        elif kind == 'text-delta':
            text = part.get('text')
            events.append(TokenEvent(content=text if isinstance(text, str) else ''))
        elif kind == 'finish':
            self.finished = True
            events.append(CompleteEvent(message=COMPLETE_MESSAGE))
        elif kind == 'tool-error':
            self.finished = True
            events.append(ErrorEvent(message=f"Tool error: {part.get('error')}"))
        elif kind == 'error':
            self.finished = True
            events.append(ErrorEvent(message=f"Error: {part.get('error')}"))
        return events

    async def transform(self, parts: AsyncIterable[Any]) -> AsyncIterator[StreamEvent]:
        """Yield the events for ``parts`` in order, ending with one terminal event.

        Consumption of ``parts`` stops at the first terminal event and
        the upstream iterator is closed, which releases the generation
        loop.  Failures raised by the upstream iterator are turned into
        an ``error`` event rather than propagated.
        """
        iterator = parts.__aiter__()
        try:
            while not self.finished:
                try:
                    part = await iterator.__anext__()
                except StopAsyncIteration:
                    break
                except Exception as e:
                    logger.exception("Model stream failed")
                    for event in self.process({'type': 'error', 'error': e}):
                        yield event
                    return
                for event in self.process(part):
                    yield event
            if not self.finished:
                logger.warning("Model stream ended without a finish or error part")
                self.finished = True
                yield ErrorEvent(message=INCOMPLETE_STREAM_MESSAGE)
        finally:
            aclose = getattr(iterator, 'aclose', None)
            if aclose is not None:
                await aclose()
