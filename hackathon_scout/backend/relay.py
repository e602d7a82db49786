"""
Relay of stream events to an HTTP response body.

:func:`relay` turns an event source into the byte chunks handed to a
streaming response.  Each event becomes exactly one chunk so the server
writes, and flushes, records one at a time in the order they were
produced.  Production is pull‑based: the next event is only requested
once the server has accepted the previous chunk.  When the client goes
away the server closes this generator, which in turn closes the event
source and stops the model run.
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterable, AsyncIterator

from .events import StreamEvent, encode_event, is_terminal

logger = logging.getLogger(__name__)


async def relay(events: AsyncIterable[StreamEvent]) -> AsyncIterator[bytes]:
    """Yield one encoded record per event, stopping after the terminal event."""
    iterator = events.__aiter__()
    count = 0
    terminal = None
    try:
        async for event in iterator:
            count += 1
            yield encode_event(event)
            # Let the server flush the record before the next one is produced
            await asyncio.sleep(0)
            if is_terminal(event):
                terminal = event.type
                break
    finally:
        aclose = getattr(iterator, 'aclose', None)
        if aclose is not None:
            await aclose()
        if terminal is None:
            logger.info(f"Relay stopped after {count} records without a terminal event")
        else:
            logger.info(f"Relayed {count} records, ending with {terminal}")
