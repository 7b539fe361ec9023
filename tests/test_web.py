from __future__ import annotations

import httpx
import pytest
import pytest_asyncio

from sse_fanout.web.events import hub
from sse_fanout.web.main import app, sse_events


@pytest_asyncio.fixture
async def client():
    await hub.disconnect_all()
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    await hub.disconnect_all()


@pytest.mark.asyncio
async def test_index_page(client):
    resp = await client.get("/")
    assert resp.status_code == 200
    assert "EventSource" in resp.text
    assert '"/sse"' in resp.text


@pytest.mark.asyncio
async def test_unknown_route_is_404(client):
    resp = await client.get("/nope")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_sse_endpoint_attaches_a_stream(client):
    resp = await sse_events()
    assert resp.media_type == "text/event-stream"
    assert resp.headers["content-type"].startswith("text/event-stream")
    assert resp.headers["cache-control"] == "no-cache"
    assert hub.count() == 1

    r = await client.post("/broadcast", json={"data": "a\nb", "id": "1", "event": "msg"})
    assert r.status_code == 200
    assert r.json() == {"clients": 1}
    chunk = await resp.body_iterator.__anext__()
    assert chunk == b"id: 1\nevent: msg\ndata: a\ndata: b\n\n"

    r = await client.post("/disconnect")
    assert r.json() == {"clients": 0}
    with pytest.raises(StopAsyncIteration):
        await resp.body_iterator.__anext__()


@pytest.mark.asyncio
async def test_broadcast_rejects_multiline_id(client, make_stream):
    s = make_stream()
    await hub.attach(s)
    resp = await client.post("/broadcast", json={"data": "x", "id": "1\n2"})
    assert resp.status_code == 422
    assert s.sent == []


@pytest.mark.asyncio
async def test_heartbeat_and_count_prune_dead_clients(client, make_stream):
    ok = make_stream("ok")
    await hub.attach(ok)
    await hub.attach(make_stream("dead", fail=True))

    assert (await client.get("/count")).json() == {"clients": 2}
    assert (await client.post("/heartbeat")).json() == {"clients": 1}
    assert (await client.get("/count")).json() == {"clients": 1}
    assert ok.sent == [b":\n\n"]


@pytest.mark.asyncio
async def test_jobs_listing(client):
    resp = await client.get("/jobs")
    assert resp.status_code == 200
    assert isinstance(resp.json(), list)
