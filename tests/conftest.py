from __future__ import annotations

import asyncio
from typing import Callable, List, Optional

import pytest


class FakeStream:
    """Output stream whose writes can be delayed, gated or made to fail."""

    def __init__(
        self,
        name: str = "",
        fail: bool = False,
        delay: float = 0.0,
        gate: Optional[asyncio.Event] = None,
        done: Optional[List[str]] = None,
    ) -> None:
        self.name = name
        self.fail = fail
        self.delay = delay
        self.gate = gate
        self.done = done
        self.sent: List[bytes] = []
        self.attempts = 0
        self.aborted = False

    async def send(self, chunk: bytes) -> None:
        self.attempts += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise ConnectionResetError(f"{self.name} went away")
        self.sent.append(chunk)
        if self.done is not None:
            self.done.append(self.name)

    def abort(self) -> None:
        self.aborted = True


@pytest.fixture
def make_stream() -> Callable[..., FakeStream]:
    return FakeStream
