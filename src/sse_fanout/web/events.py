from __future__ import annotations

from sse_fanout.services.broadcaster import Broadcaster


# Shared by the HTTP routes, the periodic jobs and the console.
hub = Broadcaster()
