from __future__ import annotations

import argparse
import asyncio
import sys
import threading
from typing import Optional, Tuple

import uvicorn

from sse_fanout.config import ServerConfig
from sse_fanout.models import Event
from sse_fanout.services.broadcaster import Broadcaster
from sse_fanout.utils.log import setup_logging


HELP = "\n".join([
    "help: show this menu",
    "send [data]: send data as a string to all connected clients",
    "event [type] [data]: send data with an event type",
    "heartbeat: send a heartbeat to all connected clients",
    "count: show number of connected clients",
    "stop: stop the server",
])


def _clients(n: int) -> str:
    if n == 1:
        return "There is 1 connected client."
    return f"There are {n} connected clients."


async def handle_command(line: str, hub: Broadcaster) -> Tuple[Optional[str], bool]:
    """Run one console command; returns the reply and whether to stop."""
    command, _, args = line.strip().partition(" ")
    if not command:
        return None, False
    if command == "help":
        return HELP, False
    if command == "send":
        await hub.broadcast(Event(data=args))
        return f"Sent '{args}' to clients.", False
    if command == "event":
        event_type, _, data = args.partition(" ")
        if not event_type:
            return "Usage: event [type] [data]", False
        await hub.broadcast(Event(data=data, event=event_type))
        return f"Sent '{data}' as '{event_type}' to clients.", False
    if command == "heartbeat":
        return _clients(await hub.heartbeat()), False
    if command == "count":
        return _clients(hub.count()), False
    if command == "stop":
        await hub.disconnect_all()
        return None, True
    return f"Unknown command {command}.", False


def _read_stdin(loop: asyncio.AbstractEventLoop, lines: asyncio.Queue[Optional[str]]) -> None:
    for line in sys.stdin:
        loop.call_soon_threadsafe(lines.put_nowait, line)
    loop.call_soon_threadsafe(lines.put_nowait, None)


async def command_loop(hub: Broadcaster) -> None:
    lines: asyncio.Queue[Optional[str]] = asyncio.Queue()
    # daemon thread: a blocked stdin read must not keep the process alive
    t = threading.Thread(target=_read_stdin, args=(asyncio.get_running_loop(), lines), daemon=True)
    t.start()
    while True:
        print("> ", end="", flush=True)
        line = await lines.get()
        if line is None:
            await hub.disconnect_all()
            return
        try:
            reply, stop = await handle_command(line, hub)
        except ValueError as e:
            reply, stop = f"Invalid event: {e}", False
        if reply:
            print(reply)
        if stop:
            return


async def _serve(server: uvicorn.Server, hub: Broadcaster) -> None:
    serve = asyncio.create_task(server.serve())
    console = asyncio.create_task(command_loop(hub))
    done, _ = await asyncio.wait({serve, console}, return_when=asyncio.FIRST_COMPLETED)
    if console in done:
        server.should_exit = True
    else:
        console.cancel()
    await serve


def main() -> None:
    cfg = ServerConfig()
    parser = argparse.ArgumentParser(description="Run the SSE server with an interactive console")
    parser.add_argument("--host", default=cfg.host)
    parser.add_argument("--port", type=int, default=cfg.port)
    parser.add_argument("--log-level", default=cfg.log_level)
    args = parser.parse_args()

    setup_logging(args.log_level)
    from sse_fanout.web.events import hub
    from sse_fanout.web.server import make_server

    server = make_server(args.host, args.port, hub=hub)
    print(f"Go to http://{args.host}:{args.port}/.")
    asyncio.run(_serve(server, hub))


if __name__ == "__main__":
    main()
