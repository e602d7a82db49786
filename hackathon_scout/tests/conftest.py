"""
Shared fixtures for the Hackathon Scout test suite.

External services are never contacted.  ArXiv is replaced by
``httpx.MockTransport`` handlers and the OpenAI client by a fake that
replays scripted chat‑completion chunks.
"""

from __future__ import annotations

import copy
from types import SimpleNamespace
from typing import Any, List, Optional

import pytest

ARXIV_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom" xmlns:arxiv="http://arxiv.org/schemas/atom">
  <link href="http://arxiv.org/api/query?search_query%3Dall%3Adiffusion" rel="self" type="application/atom+xml"/>
  <title>ArXiv Query: search_query=all:diffusion models&amp;max_results=2</title>
  <id>http://arxiv.org/api/Fz4JcSAvoOnC5a2z</id>
  <updated>2024-05-01T00:00:00-04:00</updated>
  <entry>
    <id>http://arxiv.org/abs/2006.11239v2</id>
    <updated>2020-12-16T21:15:05Z</updated>
    <published>2020-06-19T17:24:44Z</published>
    <title>Denoising Diffusion
      Probabilistic Models</title>
    <summary>  We present high quality image synthesis results using diffusion
  probabilistic models.</summary>
    <author><name>Jonathan Ho</name></author>
    <author><name>Ajay Jain</name></author>
    <author><name>Pieter Abbeel</name></author>
    <arxiv:doi>10.48550/arXiv.2006.11239</arxiv:doi>
    <link href="http://arxiv.org/abs/2006.11239v2" rel="alternate" type="text/html"/>
    <link title="pdf" href="http://arxiv.org/pdf/2006.11239v2" rel="related" type="application/pdf"/>
    <arxiv:primary_category term="cs.LG" scheme="http://arxiv.org/schemas/atom"/>
    <category term="cs.LG" scheme="http://arxiv.org/schemas/atom"/>
    <category term="stat.ML" scheme="http://arxiv.org/schemas/atom"/>
  </entry>
  <entry>
    <id>http://arxiv.org/abs/2112.10752v2</id>
    <updated>2022-04-13T11:38:44Z</updated>
    <published>2021-12-20T18:55:25Z</published>
    <title>High-Resolution Image Synthesis with Latent Diffusion Models</title>
    <summary>By decomposing the image formation process into a sequential application of denoising autoencoders.</summary>
    <author><name>Robin Rombach</name></author>
    <author><name>Andreas Blattmann</name></author>
    <link href="http://arxiv.org/abs/2112.10752v2" rel="alternate" type="text/html"/>
    <link title="pdf" href="http://arxiv.org/pdf/2112.10752v2" rel="related" type="application/pdf"/>
    <category term="cs.CV" scheme="http://arxiv.org/schemas/atom"/>
  </entry>
</feed>
"""


@pytest.fixture
def arxiv_feed() -> str:
    """An ArXiv feed with one feed title and two paper entries."""
    return ARXIV_FEED


def _choice_chunk(delta: Any, finish_reason: Optional[str] = None) -> Any:
    return SimpleNamespace(choices=[SimpleNamespace(delta=delta, finish_reason=finish_reason)])


class ChunkFactory:
    """Builders for objects shaped like OpenAI ``ChatCompletionChunk``."""

    @staticmethod
    def text(content: str, finish_reason: Optional[str] = None) -> Any:
        return _choice_chunk(SimpleNamespace(content=content, tool_calls=None), finish_reason)

    @staticmethod
    def tool(
        index: int,
        call_id: Optional[str] = None,
        name: Optional[str] = None,
        arguments: Optional[str] = None,
        finish_reason: Optional[str] = None,
    ) -> Any:
        call = SimpleNamespace(
            index=index,
            id=call_id,
            function=SimpleNamespace(name=name, arguments=arguments),
        )
        return _choice_chunk(SimpleNamespace(content=None, tool_calls=[call]), finish_reason)

    @staticmethod
    def finish(reason: str) -> Any:
        return _choice_chunk(SimpleNamespace(content=None, tool_calls=None), reason)

    @staticmethod
    def usage() -> Any:
        return SimpleNamespace(choices=[])


class FakeCompletionStream:
    def __init__(self, chunks: List[Any], error: Optional[BaseException] = None) -> None:
        self.chunks = chunks
        self.error = error
        self.closed = False

    async def __aenter__(self) -> "FakeCompletionStream":
        return self

    async def __aexit__(self, *exc_info: Any) -> bool:
        self.closed = True
        return False

    def __aiter__(self) -> Any:
        return self._iterate()

    async def _iterate(self) -> Any:
        for chunk in self.chunks:
            yield chunk
        if self.error is not None:
            raise self.error


class FakeCompletions:
    def __init__(self, scripts: List[Any]) -> None:
        self.scripts = list(scripts)
        self.requests: List[dict] = []
        self.streams: List[FakeCompletionStream] = []

    async def create(self, **kwargs: Any) -> FakeCompletionStream:
        self.requests.append(copy.deepcopy(kwargs))
        script = self.scripts.pop(0)
        if isinstance(script, BaseException):
            raise script
        stream = script if isinstance(script, FakeCompletionStream) else FakeCompletionStream(script)
        self.streams.append(stream)
        return stream


class FakeOpenAI:
    """Stand‑in for ``openai.AsyncOpenAI`` replaying one script per model call.

    Each script is a list of chunks, a :class:`FakeCompletionStream`, or
    an exception raised by ``create``.
    """

    def __init__(self, scripts: List[Any]) -> None:
        self.completions = FakeCompletions(scripts)
        self.chat = SimpleNamespace(completions=self.completions)


@pytest.fixture
def chunks() -> ChunkFactory:
    return ChunkFactory()


@pytest.fixture
def fake_openai() -> Any:
    """Factory fixture: ``fake_openai(scripts)`` returns a fake client."""
    return FakeOpenAI


@pytest.fixture
def failing_stream() -> Any:
    """Factory fixture: ``failing_stream(chunks, error)`` raises after the chunks."""
    return FakeCompletionStream
