from __future__ import annotations

import asyncio
import io
import sys

import pytest

from sse_fanout.cli.console import HELP, _serve, command_loop, handle_command
from sse_fanout.services.broadcaster import Broadcaster


@pytest.mark.asyncio
async def test_send_and_count(make_stream):
    hub = Broadcaster()
    s = make_stream()
    await hub.attach(s)

    reply, stop = await handle_command("send hello there\n", hub)
    assert reply == "Sent 'hello there' to clients."
    assert not stop
    assert s.sent == [b"data: hello there\n\n"]

    assert await handle_command("count", hub) == ("There is 1 connected client.", False)
    await hub.attach(make_stream())
    assert await handle_command("count", hub) == ("There are 2 connected clients.", False)


@pytest.mark.asyncio
async def test_event_and_heartbeat(make_stream):
    hub = Broadcaster()
    s = make_stream()
    await hub.attach(s)
    await hub.attach(make_stream(fail=True))

    reply, _ = await handle_command("event update 42", hub)
    assert reply == "Sent '42' as 'update' to clients."
    assert s.sent == [b"event: update\ndata: 42\n\n"]

    assert await handle_command("heartbeat", hub) == ("There is 1 connected client.", False)
    assert await handle_command("event", hub) == ("Usage: event [type] [data]", False)


@pytest.mark.asyncio
async def test_stop_disconnects_everyone(make_stream):
    hub = Broadcaster()
    s = make_stream()
    await hub.attach(s)
    assert await handle_command("stop", hub) == (None, True)
    assert s.aborted
    assert hub.count() == 0


@pytest.mark.asyncio
async def test_help_blank_and_unknown():
    hub = Broadcaster()
    assert await handle_command("help", hub) == (HELP, False)
    assert await handle_command("   \n", hub) == (None, False)
    assert await handle_command("dance now", hub) == ("Unknown command dance.", False)


class FakeServer:
    should_exit = False

    async def serve(self) -> None:
        while not self.should_exit:
            await asyncio.sleep(0.01)


@pytest.mark.asyncio
async def test_eof_on_stdin_disconnects_everyone(monkeypatch, capsys, make_stream):
    hub = Broadcaster()
    streams = [make_stream(), make_stream()]
    for s in streams:
        await hub.attach(s)
    monkeypatch.setattr(sys, "stdin", io.StringIO("count\nevent bad\rtype x\n"))

    await asyncio.wait_for(command_loop(hub), 2)

    out = capsys.readouterr().out
    assert "There are 2 connected clients." in out
    assert "Invalid event:" in out
    assert hub.count() == 0
    assert all(s.aborted and s.sent == [] for s in streams)


@pytest.mark.asyncio
async def test_stop_command_shuts_the_server_down(monkeypatch, make_stream):
    hub = Broadcaster()
    s = make_stream()
    await hub.attach(s)
    monkeypatch.setattr(sys, "stdin", io.StringIO("stop\n"))
    server = FakeServer()

    await asyncio.wait_for(_serve(server, hub), 2)
    assert server.should_exit
    assert s.aborted
