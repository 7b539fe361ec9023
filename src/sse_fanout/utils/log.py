from __future__ import annotations

from logging.config import dictConfig
from typing import Union


def setup_logging(level: str = "INFO") -> None:
    """Configure console logging, keeping uvicorn's loggers on the same handler."""
    level = (level or "INFO").upper()
    dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "plain": {"format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s"},
        },
        "handlers": {
            "console": {"class": "logging.StreamHandler", "formatter": "plain"},
        },
        "loggers": {
            "": {"handlers": ["console"], "level": level},
            "uvicorn": {"handlers": ["console"], "level": level, "propagate": False},
            "uvicorn.error": {"handlers": ["console"], "level": level, "propagate": False},
            "uvicorn.access": {"handlers": ["console"], "level": "WARNING", "propagate": False},
        },
    })


def preview(payload: Union[str, bytes], limit: int = 60) -> str:
    """Short single-line rendering of a payload for log messages.

    Event bodies can be large; logging them whole floods the console.
    """
    if isinstance(payload, (bytes, bytearray)):
        text = bytes(payload).decode("utf-8", errors="replace")
    else:
        text = payload
    text = repr(text)
    if len(text) > limit:
        return text[: limit - 3] + "..."
    return text
