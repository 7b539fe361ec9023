"""Broadcast registry and drivers for the SSE server."""

from .broadcaster import Broadcaster, ClientDisconnected, OutputStream

__all__ = ["Broadcaster", "ClientDisconnected", "OutputStream"]
