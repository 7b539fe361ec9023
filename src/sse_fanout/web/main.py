from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, StreamingResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel

from sse_fanout.config import ServerConfig
from sse_fanout.models import Event
from .events import hub
from .jobs import JobManager
from .streams import open_stream


logger = logging.getLogger(__name__)

config = ServerConfig()
app = FastAPI(title="SSE Fan-out")
templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
jobs = JobManager(hub)


class ClientCount(BaseModel):
    clients: int


class JobInfo(BaseModel):
    id: str
    kind: str
    interval: float
    status: str
    ticks: int
    last_count: int | None = None
    last_error: str | None = None


@app.on_event("startup")
async def on_startup() -> None:
    logger.info("Event stream available at %s", config.sse_path)
    if config.heartbeat_secs > 0:
        jobs.start(config.heartbeat_secs)
    if config.tick_secs > 0:
        jobs.start(config.tick_secs, Event(data=config.tick_data))


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await jobs.stop_all()
    await hub.disconnect_all()


@app.get("/", response_class=HTMLResponse)
def index(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "index.html",
        {"sse_path": config.sse_path},
    )


async def sse_events() -> StreamingResponse:
    sender, body = open_stream(buffer=config.stream_buffer)
    await hub.attach(sender)
    headers = {"Cache-Control": "no-cache"}
    return StreamingResponse(body, media_type="text/event-stream", headers=headers)


app.add_api_route(config.sse_path, sse_events, methods=["GET"])


@app.post("/broadcast")
async def broadcast(event: Event) -> ClientCount:
    return ClientCount(clients=await hub.broadcast(event))


@app.post("/heartbeat")
async def heartbeat() -> ClientCount:
    return ClientCount(clients=await hub.heartbeat())


@app.get("/count")
def count() -> ClientCount:
    return ClientCount(clients=hub.count())


@app.post("/disconnect")
async def disconnect() -> ClientCount:
    await hub.disconnect_all()
    return ClientCount(clients=hub.count())


@app.get("/jobs")
def list_jobs() -> List[JobInfo]:
    return [
        JobInfo(
            id=j.id,
            kind=j.kind,
            interval=j.interval,
            status=j.status,
            ticks=j.ticks,
            last_count=j.last_count,
            last_error=j.last_error,
        )
        for j in jobs.list_recent(limit=20)
    ]
