"""Server-sent event model and its wire encoding."""

from __future__ import annotations

import re
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator


HEARTBEAT = ":\n\n"

# SSE recognises CRLF, lone CR and lone LF as line terminators.
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class Event(BaseModel):
    """A single server-sent event.

    ``data`` may span several lines; ``id`` and ``event`` must be single-line
    values, otherwise they would corrupt the framing of the stream.
    """

    model_config = ConfigDict(frozen=True)

    data: str
    id: Optional[str] = None
    event: Optional[str] = None

    @field_validator("id", "event")
    @classmethod
    def _single_line(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and _LINE_BREAK.search(v):
            raise ValueError("must not contain line breaks")
        return v

    def to_sse(self) -> str:
        return encode(self)

    def __str__(self) -> str:
        return encode(self)

    def __bytes__(self) -> bytes:
        return encode(self).encode("utf-8")


def encode(event: Event) -> str:
    """Render ``event`` as SSE text, terminated by a blank line."""
    lines = []
    if event.id is not None:
        lines.append(f"id: {event.id}\n")
    if event.event is not None:
        lines.append(f"event: {event.event}\n")
    for segment in _LINE_BREAK.split(event.data):
        lines.append(f"data: {segment}\n")
    lines.append("\n")
    return "".join(lines)


def heartbeat() -> str:
    """Comment-only frame; keeps idle connections open without a message."""
    return HEARTBEAT


def as_bytes(payload: Union[str, bytes, Event]) -> bytes:
    if isinstance(payload, Event):
        return bytes(payload)
    if isinstance(payload, str):
        return payload.encode("utf-8")
    return bytes(payload)
