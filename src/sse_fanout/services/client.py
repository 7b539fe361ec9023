from __future__ import annotations

from typing import Any, Optional

import requests

from sse_fanout.config import ServerConfig
from sse_fanout.models import Event


class ControlError(RuntimeError):
    """The control endpoint could not be reached or rejected the request."""


class ControlClient:
    """Thin client for a running server's control endpoints.

    Every call returns the live client count reported by the server.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: float = 10.0) -> None:
        self.base_url = (base_url or ServerConfig().control_url).rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers["User-Agent"] = "sse-fanout/0.1"

    def _call(self, method: str, path: str, payload: Optional[dict[str, Any]] = None) -> int:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, json=payload, timeout=self.timeout)
            resp.raise_for_status()
            return int(resp.json()["clients"])
        except requests.RequestException as e:
            raise ControlError(f"{method} {url} failed: {e}") from e
        except (KeyError, TypeError, ValueError) as e:
            raise ControlError(f"{method} {url} returned an unexpected body") from e

    def broadcast(self, data: str, id: Optional[str] = None, event: Optional[str] = None) -> int:
        ev = Event(data=data, id=id, event=event)
        return self._call("POST", "/broadcast", ev.model_dump(exclude_none=True))

    def heartbeat(self) -> int:
        return self._call("POST", "/heartbeat")

    def count(self) -> int:
        return self._call("GET", "/count")

    def disconnect_all(self) -> int:
        return self._call("POST", "/disconnect")
