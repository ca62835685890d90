"""
Incremental decoder for newline-delimited JSON chunk streams.

The streaming endpoint sends one JSON object per line. Network reads do not
respect line boundaries, so the decoder keeps the trailing partial line in
a buffer until the rest of it arrives. Lines that are empty or not valid
chunk records are skipped.
"""

from __future__ import annotations

import codecs
import json
from collections import deque
from typing import TYPE_CHECKING, Any, AsyncIterator

import pydantic
from loguru import logger

from .models import StreamChunk

if TYPE_CHECKING:
    import httpx

    from .cancellation import CancelSignal


def parse_chunk(line: str) -> StreamChunk | None:
    """Parse one line into a StreamChunk.

    Args:
        line: A single line of the stream (may contain surrounding whitespace).

    Returns:
        The chunk, or None for empty or malformed lines.
    """
    text = line.strip()
    if not text:
        return None
    try:
        record = json.loads(text)
        return StreamChunk.model_validate(record)
    except (ValueError, pydantic.ValidationError):
        logger.debug(f"Skipping malformed stream line: {text[:200]!r}")
        return None


class StreamDecoder:
    """Async iterator over the chunks of a streaming response.

    The decoder is a pull-based cursor: each ``__anext__`` returns a chunk
    decoded from data already read, or reads more bytes until a complete
    line is available. It cannot be restarted; open a new stream instead.

    The caller's signal is checked before every read, so cancellation takes
    effect after the read in flight. The response is released exactly once
    on every exit path: end of stream, cancellation, an error, or ``aclose``.

    Example:
        response = await client.stream_request("/chat", body)
        async with StreamDecoder(response) as chunks:
            async for chunk in chunks:
                if chunk.is_text_delta():
                    print(chunk.data, end="")
    """

    def __init__(self, response: "httpx.Response", signal: "CancelSignal | None" = None):
        self._response = response
        self._signal = signal
        self._reader: AsyncIterator[bytes] | None = None
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._pending: deque[StreamChunk] = deque()
        self._finished = False
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def __aiter__(self) -> "StreamDecoder":
        return self

    async def __anext__(self) -> StreamChunk:
        while not self._pending:
            if self._finished:
                raise StopAsyncIteration

            if self._signal is not None and self._signal.cancelled:
                self._finished = True
                await self.aclose()
                raise StopAsyncIteration

            try:
                await self._read_more()
            except BaseException:
                self._finished = True
                await self.aclose()
                raise

        return self._pending.popleft()

    async def _read_more(self) -> None:
        if self._reader is None:
            self._reader = self._response.aiter_bytes()

        try:
            data = await self._reader.__anext__()
        except StopAsyncIteration:
            self._flush()
            self._finished = True
            await self.aclose()
            return

        self._feed(self._decoder.decode(data))

    def _feed(self, text: str) -> None:
        self._buffer += text
        lines = self._buffer.split("\n")
        self._buffer = lines.pop()
        for line in lines:
            chunk = parse_chunk(line)
            if chunk is not None:
                self._pending.append(chunk)

    def _flush(self) -> None:
        self._buffer += self._decoder.decode(b"", final=True)
        self._feed("\n")
        self._buffer = ""

    async def aclose(self) -> None:
        """Release the reader and the response. Safe to call repeatedly."""
        if self._released:
            return
        self._released = True
        self._finished = True
        try:
            if self._reader is not None:
                await self._reader.aclose()  # type: ignore[attr-defined]
        finally:
            await self._response.aclose()

    async def __aenter__(self) -> "StreamDecoder":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()


def parse_stream(response: "httpx.Response", signal: "CancelSignal | None" = None) -> StreamDecoder:
    """Create a StreamDecoder for a streaming response."""
    return StreamDecoder(response, signal)
