from __future__ import annotations

import asyncio
import logging
from typing import List, Protocol, Union

from sse_fanout.models import Event, HEARTBEAT, as_bytes
from sse_fanout.utils.log import preview


logger = logging.getLogger(__name__)


class ClientDisconnected(Exception):
    """The reader of a stream is gone; nothing sent will be delivered."""


# routine ways for a client write to fail
DISCONNECT_ERRORS = (ClientDisconnected, ConnectionError, EOFError)


class OutputStream(Protocol):
    """Write end of one client's response body."""

    async def send(self, chunk: bytes) -> None: ...

    def abort(self) -> None: ...


class Broadcaster:
    """Fans encoded events out to every attached client stream.

    - Dead clients are only discovered when a write to them fails during
      ``broadcast``/``heartbeat``; they are then dropped.
    - ``count()`` can therefore over-estimate the number of live clients.
    - Writes to distinct clients run concurrently; a call returns once every
      write has either succeeded or failed. No per-write timeout is applied
      here, a client that never drains stalls that call until its transport
      gives up.
    """

    def __init__(self) -> None:
        self._clients: List[OutputStream] = []
        self._lock = asyncio.Lock()

    async def attach(self, stream: OutputStream) -> None:
        async with self._lock:
            self._clients.append(stream)
        logger.debug("Client attached (%d total)", len(self._clients))

    async def broadcast(self, payload: Union[str, bytes, Event]) -> int:
        """Send ``payload`` to all clients and return how many are still connected."""
        chunk = as_bytes(payload)
        async with self._lock:
            targets = list(self._clients)
        if not targets:
            return 0

        results = await asyncio.gather(*(self._send(c, chunk) for c in targets))
        failed = {id(c) for c, ok in zip(targets, results) if not ok}

        async with self._lock:
            if failed:
                self._clients = [c for c in self._clients if id(c) not in failed]
            remaining = len(self._clients)
        logger.debug(
            "Broadcast %s to %d clients, pruned %d, %d remaining",
            preview(chunk),
            len(targets),
            len(failed),
            remaining,
        )
        return remaining

    async def heartbeat(self) -> int:
        return await self.broadcast(HEARTBEAT)

    async def disconnect_all(self) -> None:
        async with self._lock:
            clients, self._clients = self._clients, []
        for client in clients:
            client.abort()
        logger.info("Disconnected %d clients", len(clients))

    def count(self) -> int:
        """Number of held connections; may include clients that already left."""
        return len(self._clients)

    @property
    def connections(self) -> int:
        return self.count()

    @staticmethod
    async def _send(client: OutputStream, chunk: bytes) -> bool:
        try:
            await client.send(chunk)
        except DISCONNECT_ERRORS as e:
            logger.debug("Pruning client after failed write: %r", e)
            return False
        except Exception:
            logger.warning("Pruning client after unexpected write error", exc_info=True)
            return False
        return True
