"""Server-sent events fan-out broadcaster."""

from .models import HEARTBEAT, Event, encode, heartbeat
from .services.broadcaster import Broadcaster

__all__ = ["HEARTBEAT", "Broadcaster", "Event", "encode", "heartbeat"]
