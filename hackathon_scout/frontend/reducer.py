"""
Client‑side accumulation of the scout's event stream.

The server sends newline‑delimited JSON records over a chunked
response.  A chunk may end in the middle of a record, or even in the
middle of a multi‑byte character, so :class:`LineSplitter` carries the
unfinished tail from one chunk to the next and only hands out complete
lines.  :class:`ScoutReducer` decodes each line and folds it into the
display state shown by the UI: a status, an append‑only activity log
and the response text accumulated from ``token`` events.

Records that cannot be decoded are dropped and counted; they never end
the session.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict

from hackathon_scout.backend.events import (
    EventDecodeError,
    StreamEvent,
    ToolResultEvent,
    decode_event,
)

logger = logging.getLogger(__name__)

IDLE = 'idle'
LOADING = 'loading'
COMPLETE = 'complete'
ERROR = 'error'

DEFAULT_COMPLETE_MESSAGE = '✅ Done'
DEFAULT_ERROR_MESSAGE = 'An error occurred'


class LineSplitter:
    """Incremental splitter of a chunked stream into newline‑terminated lines.

    Splitting happens on raw bytes; a newline byte never occurs inside a
    multi‑byte UTF‑8 sequence, so a character cut across chunks is simply
    carried over with the rest of its line.  Lines are returned undecoded
    and invalid UTF‑8 is left for :func:`decode_event` to reject.
    """

    def __init__(self) -> None:
        self._pending = b''

    def feed(self, chunk: Union[bytes, str]) -> List[bytes]:
        """Add a chunk and return every line it completes, without terminators."""
        if isinstance(chunk, str):
            chunk = chunk.encode('utf-8')
        lines = (self._pending + chunk).split(b'\n')
        self._pending = lines.pop()
        return lines

    def flush(self) -> Optional[bytes]:
        """Return the unterminated final record, if any, and reset the buffer."""
        tail, self._pending = self._pending, b''
        return tail if tail.strip() else None


class ActivityItem(BaseModel):
    """One entry of the activity log.  Never modified once appended."""

    model_config = ConfigDict(frozen=True)

    id: int
    type: str
    message: str


class ScoutReducer:
    """Fold stream events into ``(status, activities, response_text)``."""

    def __init__(self) -> None:
        self.status = IDLE
        self.activities: List[ActivityItem] = []
        self.response_text = ''
        self.tool_results: List[ToolResultEvent] = []
        self.dropped_records = 0
        self._splitter = LineSplitter()

    @property
    def is_terminal(self) -> bool:
        return self.status in (COMPLETE, ERROR)

    def start(self) -> None:
        """Reset the state for a new search."""
        self.status = LOADING
        self.activities = []
        self.response_text = ''
        self.tool_results = []
        self.dropped_records = 0
        self._splitter = LineSplitter()

    def feed(self, chunk: Union[bytes, str]) -> None:
        """Consume a raw chunk of the response body."""
        for line in self._splitter.feed(chunk):
            self._apply_line(line)

    def close(self) -> None:
        """Signal the end of the body; the last record needs no newline."""
        tail = self._splitter.flush()
        if tail is not None:
            self._apply_line(tail)

    def connection_error(self, message: str) -> None:
        """Record a transport failure, distinct from an ``error`` event."""
        if self.is_terminal:
            return
        self._append_activity(ERROR, message or DEFAULT_ERROR_MESSAGE)
        self.status = ERROR

    def _apply_line(self, line: bytes) -> None:
        if not line.strip():
            return
        try:
            event = decode_event(line)
        except EventDecodeError as e:
            self.dropped_records += 1
            logger.warning(f"Dropping malformed stream record: {e}")
            return
        self.apply(event)

    def _append_activity(self, kind: str, message: str) -> None:
        self.activities.append(ActivityItem(id=len(self.activities) + 1, type=kind, message=message))

    def apply(self, event: StreamEvent) -> None:
        """Apply one decoded event to the state."""
        # The stream is over once a terminal event has been seen
        if self.is_terminal:
            return
        if self.status == IDLE:
            self.status = LOADING
        if event.type in ('tool_call', 'tool_result', 'llm_start'):
            self._append_activity(event.type, event.message or '')
            if isinstance(event, ToolResultEvent):
                self.tool_results.append(event)
        elif event.type == 'token':
            self.response_text += event.content
        elif event.type == 'complete':
            self._append_activity(COMPLETE, event.message or DEFAULT_COMPLETE_MESSAGE)
            self.status = COMPLETE
        elif event.type == 'error':
            self._append_activity(ERROR, event.message or DEFAULT_ERROR_MESSAGE)
            self.status = ERROR
