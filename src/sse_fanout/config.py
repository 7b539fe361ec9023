from __future__ import annotations

import os
from dataclasses import dataclass, field


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.environ.get(name, str(default)))
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, str(default)))
    except ValueError:
        return default


@dataclass
class ServerConfig:
    host: str = field(default_factory=lambda: os.environ.get("SSE_HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: _env_int("SSE_PORT", 8000))
    sse_path: str = field(default_factory=lambda: os.environ.get("SSE_PATH", "/sse"))
    # 0 disables the job
    heartbeat_secs: float = field(default_factory=lambda: _env_float("SSE_HEARTBEAT_SECS", 15.0))
    tick_secs: float = field(default_factory=lambda: _env_float("SSE_TICK_SECS", 0.0))
    tick_data: str = field(default_factory=lambda: os.environ.get("SSE_TICK_DATA", "Some data"))
    stream_buffer: int = field(default_factory=lambda: _env_int("SSE_STREAM_BUFFER", 1))
    log_level: str = field(default_factory=lambda: os.environ.get("SSE_LOG_LEVEL", "INFO"))
    control_url: str = field(
        default_factory=lambda: os.environ.get("SSE_CONTROL_URL", "http://127.0.0.1:8000")
    )
