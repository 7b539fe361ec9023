"""In-process channel between the broadcaster and a streaming HTTP response."""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, Optional, Tuple

from sse_fanout.services.broadcaster import ClientDisconnected


class StreamAborted(ClientDisconnected):
    """The stream was shut down from the server side."""


class StreamSender:
    """Write end of a response body.

    - ``send`` waits while the buffer is full, so a client that stops reading
      eventually blocks its writer.
    - Once the reader goes away (client hung up) ``send`` raises
      ``ClientDisconnected``, also for writes already waiting.
    - ``abort`` drops anything buffered and ends the body immediately.
    """

    def __init__(self, buffer: int = 1) -> None:
        self._queue: asyncio.Queue[bytes] = asyncio.Queue(maxsize=max(1, buffer))
        self._gone = asyncio.Event()
        self._aborted = False

    @property
    def closed(self) -> bool:
        return self._gone.is_set()

    @property
    def aborted(self) -> bool:
        return self._aborted

    async def send(self, chunk: bytes) -> None:
        self._check()
        if not self._queue.full():
            self._queue.put_nowait(chunk)
            return
        put = asyncio.ensure_future(self._queue.put(chunk))
        gone = asyncio.ensure_future(self._gone.wait())
        try:
            await asyncio.wait({put, gone}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            gone.cancel()
            if not put.done():
                put.cancel()
        if put.cancelled() or not put.done():
            self._check()
            raise ClientDisconnected("stream closed while waiting for buffer space")
        self._check()

    def abort(self) -> None:
        self._aborted = True
        while not self._queue.empty():
            self._queue.get_nowait()
        self._gone.set()

    def _close(self) -> None:
        self._gone.set()

    def _check(self) -> None:
        if self._aborted:
            raise StreamAborted("stream aborted")
        if self._gone.is_set():
            raise ClientDisconnected("client disconnected")

    async def body(self) -> AsyncIterator[bytes]:
        """Response body: yields chunks until the client leaves or the stream is aborted."""
        try:
            while not self._gone.is_set():
                chunk = await self._next()
                if chunk is None:
                    break
                yield chunk
        finally:
            self._close()

    async def _next(self) -> Optional[bytes]:
        if not self._queue.empty():
            return self._queue.get_nowait()
        get = asyncio.ensure_future(self._queue.get())
        gone = asyncio.ensure_future(self._gone.wait())
        try:
            await asyncio.wait({get, gone}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            gone.cancel()
            if not get.done():
                get.cancel()
        if self._aborted or get.cancelled() or not get.done():
            return None
        return get.result()


def open_stream(buffer: int = 1) -> Tuple[StreamSender, AsyncIterator[bytes]]:
    """Create a channel; hand the sender to the broadcaster and the body to the response."""
    sender = StreamSender(buffer=buffer)
    return sender, sender.body()
