from __future__ import annotations

import argparse
import socket
from typing import List, Optional

import uvicorn

from sse_fanout.config import ServerConfig
from sse_fanout.services.broadcaster import Broadcaster
from sse_fanout.utils.log import setup_logging
from .events import hub as shared_hub


class SSEServer(uvicorn.Server):
    """uvicorn server that ends every event stream before draining connections.

    uvicorn waits for open connections to finish before running the app's
    shutdown hooks, and event streams never finish on their own, so the
    streams are aborted first.
    """

    def __init__(self, config: uvicorn.Config, hub: Optional[Broadcaster] = None) -> None:
        super().__init__(config)
        self.hub = hub if hub is not None else shared_hub

    async def shutdown(self, sockets: Optional[List[socket.socket]] = None) -> None:
        await self.hub.disconnect_all()
        await super().shutdown(sockets=sockets)


def make_server(host: str, port: int, hub: Optional[Broadcaster] = None) -> SSEServer:
    from .main import app

    return SSEServer(uvicorn.Config(app, host=host, port=port, log_config=None), hub=hub)


def main() -> None:
    cfg = ServerConfig()
    parser = argparse.ArgumentParser(description="Run the SSE server")
    parser.add_argument("--host", default=cfg.host)
    parser.add_argument("--port", type=int, default=cfg.port)
    parser.add_argument("--log-level", default=cfg.log_level)
    args = parser.parse_args()

    setup_logging(args.log_level)
    make_server(args.host, args.port).run()


if __name__ == "__main__":
    main()
