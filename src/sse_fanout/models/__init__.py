"""Event models for the SSE broadcaster."""

from .event import HEARTBEAT, Event, as_bytes, encode, heartbeat

__all__ = ["HEARTBEAT", "Event", "as_bytes", "encode", "heartbeat"]
