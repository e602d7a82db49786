"""
Stream event models and their JSON‑line wire codec.

Every unit of progress sent from the server to a client is one of six
event types, discriminated by the ``type`` field:

* ``tool_call`` – a tool invocation has begun
* ``tool_result`` – a tool invocation completed
* ``llm_start`` – the model has begun generating (at most once)
* ``token`` – an incremental fragment of generated text
* ``complete`` – terminal, processing finished successfully
* ``error`` – terminal, processing failed

On the wire each event is one compact JSON object followed by ``\\n``.
Optional fields that are absent are omitted from the record, and the
tool call identifier travels under its camelCase name ``toolCallId``.
:func:`decode_event` is the exact inverse of :func:`encode_event`.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

TERMINAL_EVENT_TYPES = frozenset({'complete', 'error'})


class EventDecodeError(ValueError):
    """Raised when a wire record cannot be decoded into a stream event."""


class _StreamEventBase(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class ToolCallEvent(_StreamEventBase):
    type: Literal['tool_call'] = 'tool_call'
    tool: str
    message: str
    tool_call_id: Optional[str] = Field(default=None, alias='toolCallId')
    input: Any = None


class ToolResultEvent(_StreamEventBase):
    """A finished tool call.  ``message`` is a short human‑readable summary."""

    type: Literal['tool_result'] = 'tool_result'
    tool: str
    message: str
    tool_call_id: Optional[str] = Field(default=None, alias='toolCallId')
    input: Any = None
    output: Any = None


class LLMStartEvent(_StreamEventBase):
    type: Literal['llm_start'] = 'llm_start'
    model: str
    message: str


class TokenEvent(_StreamEventBase):
    type: Literal['token'] = 'token'
    content: str


class CompleteEvent(_StreamEventBase):
    type: Literal['complete'] = 'complete'
    message: str


class ErrorEvent(_StreamEventBase):
    type: Literal['error'] = 'error'
    message: str


StreamEvent = Annotated[
    Union[ToolCallEvent, ToolResultEvent, LLMStartEvent, TokenEvent, CompleteEvent, ErrorEvent],
    Field(discriminator='type'),
]

_stream_event_adapter: TypeAdapter = TypeAdapter(StreamEvent)


def is_terminal(event: Any) -> bool:
    """Return True for the events that end a stream."""
    return getattr(event, 'type', None) in TERMINAL_EVENT_TYPES


def encode_event(event: StreamEvent) -> bytes:
    """Serialise one event into a single newline‑terminated JSON record."""
    data = event.model_dump(mode='json', by_alias=True)
    record = {key: value for key, value in data.items() if value is not None}
    return (json.dumps(record, ensure_ascii=False, separators=(',', ':')) + '\n').encode('utf-8')


def decode_event(line: Union[str, bytes]) -> StreamEvent:
    """Parse one wire record back into its event model.

    Raises:
        EventDecodeError: If the record is not valid JSON, names an
            unknown event type or lacks a required field.
    """
    if isinstance(line, bytes):
        try:
            line = line.decode('utf-8')
        except UnicodeDecodeError as e:
            raise EventDecodeError(f"Record is not valid UTF-8: {e}") from e
    try:
        return _stream_event_adapter.validate_json(line.strip())
    except ValidationError as e:
        raise EventDecodeError(f"Malformed stream record: {e.errors()[0]['msg']}") from e
