from __future__ import annotations

import argparse
import sys

from pydantic import ValidationError

from sse_fanout.services.client import ControlClient, ControlError


def main() -> None:
    parser = argparse.ArgumentParser(description="Broadcast one event through a running SSE server")
    parser.add_argument("data", nargs="?", default=None, help="Event data; omit to send a heartbeat")
    parser.add_argument("--id", default=None, help="Event id")
    parser.add_argument("--event", default=None, help="Event type")
    parser.add_argument("--url", default=None, help="Server base URL (default: $SSE_CONTROL_URL)")
    parser.add_argument("--timeout", type=float, default=10.0)
    args = parser.parse_args()

    client = ControlClient(args.url, timeout=args.timeout)
    try:
        if args.data is None:
            n = client.heartbeat()
        else:
            n = client.broadcast(args.data, id=args.id, event=args.event)
    except (ControlError, ValidationError) as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)
    print(f"Sent to {n} connected client{'s' if n != 1 else ''}.")


if __name__ == "__main__":
    main()
