"""
Model‑calling runtime with tool support.

:class:`ToolRuntime` drives an OpenAI chat model through a bounded
number of steps.  Each step streams one chat completion; text deltas
are forwarded as they arrive, tool calls are collected, executed once
the completion ends and their results are fed back for the next step.
The runtime reports what happens as a stream of plain dictionaries
("parts") discriminated by ``type``:

``start``, ``start-step``, ``text-start``, ``text-delta``, ``text-end``,
``tool-call``, ``tool-result``, ``tool-error``, ``finish-step``,
``finish`` and ``error``.

Provider failures end the stream with an ``error`` part.  Failures of
an individual tool are reported as ``tool-error`` and passed back to
the model as the tool's output.
"""

from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Sequence

import openai

from . import config

logger = logging.getLogger(__name__)


class Tool:
    """A function the model may call.

    Args:
        name: Name the model uses to call the tool.
        description: Natural‑language description shown to the model.
        parameters: JSON schema of the keyword arguments.
        execute: Coroutine function invoked with the parsed arguments.
    """

    def __init__(
        self,
        name: str,
        description: str,
        parameters: Dict[str, Any],
        execute: Callable[..., Awaitable[Any]],
    ) -> None:
        self.name = name
        self.description = description
        self.parameters = parameters
        self.execute = execute

    def to_openai(self) -> Dict[str, Any]:
        return {
            'type': 'function',
            'function': {
                'name': self.name,
                'description': self.description,
                'parameters': self.parameters,
            },
        }


def _tool_message_content(output: Any) -> str:
    return output if isinstance(output, str) else json.dumps(output)


class ToolRuntime:
    """Run a chat model with tools and stream its progress as parts."""

    def __init__(
        self,
        client: Any,
        model: str,
        tools: Sequence[Tool],
        max_steps: int = config.MAX_STEPS,
    ) -> None:
        self.client = client
        self.model = model
        self.tools = {tool.name: tool for tool in tools}
        self.max_steps = max(1, max_steps)

    async def _run_tool(self, call: Dict[str, str]) -> AsyncIterator[Dict[str, Any]]:
        call_id, name = call['id'], call['name']
        tool = self.tools.get(name)
        if tool is None:
            yield {'type': 'tool-error', 'toolCallId': call_id, 'toolName': name,
                   'error': f"Unknown tool: {name}"}
            return
        try:
            args = json.loads(call['arguments'] or '{}')
        except json.JSONDecodeError as e:
            yield {'type': 'tool-error', 'toolCallId': call_id, 'toolName': name,
                   'error': f"Invalid arguments for {name}: {e}"}
            return
        yield {'type': 'tool-call', 'toolCallId': call_id, 'toolName': name, 'input': args}
        try:
            output = await tool.execute(**args)
        except Exception as e:
            logger.exception(f"Tool {name} failed")
            yield {'type': 'tool-error', 'toolCallId': call_id, 'toolName': name,
                   'input': args, 'error': e}
            return
        yield {'type': 'tool-result', 'toolCallId': call_id, 'toolName': name,
               'input': args, 'output': output}

    async def stream(self, system: str, prompt: str) -> AsyncIterator[Dict[str, Any]]:
        """Run the model on ``prompt`` and yield runtime parts until it finishes."""
        messages: List[Dict[str, Any]] = [
            {'role': 'system', 'content': system},
            {'role': 'user', 'content': prompt},
        ]
        tool_specs = [tool.to_openai() for tool in self.tools.values()]
        yield {'type': 'start'}
        finish_reason: Optional[str] = None
        for step in range(self.max_steps):
            yield {'type': 'start-step'}
            text_id = f"text-{step}"
            text_chunks: List[str] = []
            calls: Dict[int, Dict[str, str]] = {}
            finish_reason = None
            try:
                request: Dict[str, Any] = {'model': self.model, 'messages': messages, 'stream': True}
                if tool_specs:
                    request['tools'] = tool_specs
                async with await self.client.chat.completions.create(**request) as completion:
                    async for chunk in completion:
                        if not chunk.choices:
                            continue
                        choice = chunk.choices[0]
                        delta = choice.delta
                        content = getattr(delta, 'content', None)
                        if content:
                            if not text_chunks:
                                yield {'type': 'text-start', 'id': text_id}
                            text_chunks.append(content)
                            yield {'type': 'text-delta', 'id': text_id, 'text': content}
                        for tool_call in getattr(delta, 'tool_calls', None) or []:
                            slot = calls.setdefault(tool_call.index, {'id': '', 'name': '', 'arguments': ''})
                            if tool_call.id:
                                slot['id'] = tool_call.id
                            function = tool_call.function
                            if function is not None:
                                if function.name:
                                    slot['name'] = function.name
                                if function.arguments:
                                    slot['arguments'] += function.arguments
                        if choice.finish_reason:
                            finish_reason = choice.finish_reason
            except openai.OpenAIError as e:
                logger.error(f"Model request failed at step {step}: {e}")
                yield {'type': 'error', 'error': e}
                return
            if text_chunks:
                yield {'type': 'text-end', 'id': text_id}

            if not calls:
                yield {'type': 'finish-step', 'finishReason': finish_reason or 'stop'}
                break

            ordered_calls = [calls[index] for index in sorted(calls)]
            messages.append({
                'role': 'assistant',
                'content': ''.join(text_chunks) or None,
                'tool_calls': [
                    {
                        'id': call['id'],
                        'type': 'function',
                        'function': {'name': call['name'], 'arguments': call['arguments']},
                    }
                    for call in ordered_calls
                ],
            })
            for call in ordered_calls:
                result_content = ''
                async for part in self._run_tool(call):
                    if part['type'] == 'tool-result':
                        result_content = _tool_message_content(part['output'])
                    elif part['type'] == 'tool-error':
                        result_content = f"Error: {part['error']}"
                    yield part
                messages.append({'role': 'tool', 'tool_call_id': call['id'], 'content': result_content})
            yield {'type': 'finish-step', 'finishReason': finish_reason or 'tool_calls'}
        yield {'type': 'finish', 'finishReason': finish_reason or 'stop'}
