from __future__ import annotations

import asyncio
import dataclasses
import json
from collections.abc import AsyncIterator
from typing import Any

import aiohttp
import pytest
import pytest_asyncio
from aiohttp import test_utils, web

from pygeotrack.broadcast import Subscriber
from pygeotrack.config import GeoTrackConfig
from pygeotrack.models import BatchMessage
from pygeotrack.orchestrator import build_orchestrator
from pygeotrack.server import RUNTIME_KEY, _pump, create_app

CONFIG = GeoTrackConfig(live_sources_enabled=False, seed=1, sim_interval=60.0, resync_interval=60.0)


@pytest_asyncio.fixture
async def client() -> AsyncIterator[test_utils.TestClient]:
    app = create_app(CONFIG, orchestrator=build_orchestrator(CONFIG, None))
    async with test_utils.TestClient(test_utils.TestServer(app)) as client:
        yield client


async def _receive_json(ws: aiohttp.ClientWebSocketResponse) -> dict[str, Any]:
    msg = await ws.receive(timeout=5.0)
    assert msg.type == aiohttp.WSMsgType.TEXT
    return json.loads(msg.data)


# ------------------------------------------------------------------
# HTTP API
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_health_reports_offline_pipeline(client: test_utils.TestClient) -> None:
    resp = await client.get("/api/health")

    assert resp.status == 200
    body = await resp.json()
    assert body["status"] == "ok"
    assert body["entities"] > 0
    assert body["running"] is True
    assert body["paused"] is False
    assert body["subscribers"] == 0
    assert body["liveCategories"] == []
    assert body["degradedCategories"] == []


@pytest.mark.asyncio
async def test_snapshot_and_entity_lookup(client: test_utils.TestClient) -> None:
    snapshot = await (await client.get("/api/snapshot")).json()

    assert snapshot["type"] == "snapshot"
    assert set(snapshot["data"]) == {"entities", "anomalies", "clusters"}
    first = snapshot["data"]["entities"][0]

    resp = await client.get(f"/api/entity/{first['id']}")
    assert resp.status == 200
    entity = await resp.json()
    assert entity["id"] == first["id"]
    assert "observedAt" in entity


@pytest.mark.asyncio
async def test_unknown_entity_is_404(client: test_utils.TestClient) -> None:
    resp = await client.get("/api/entity/does-not-exist")

    assert resp.status == 404
    assert "does-not-exist" in (await resp.json())["error"]


@pytest.mark.asyncio
async def test_filters_endpoint(client: test_utils.TestClient) -> None:
    resp = await client.post("/api/filters", json={"types": ["satellite"]})

    assert resp.status == 200
    snapshot = await resp.json()
    assert snapshot["data"]["entities"]
    assert {entity["type"] for entity in snapshot["data"]["entities"]} == {"satellite"}
    assert client.app[RUNTIME_KEY].require().filters.types is not None


@pytest.mark.parametrize(
    "body",
    ["{not json", '{"speedMin": "fast"}', "[1, 2]"],
)
@pytest.mark.asyncio
async def test_filters_endpoint_rejects_bad_input(client: test_utils.TestClient, body: str) -> None:
    resp = await client.post("/api/filters", data=body, headers={"Content-Type": "application/json"})

    assert resp.status == 400
    assert "error" in await resp.json()


# ------------------------------------------------------------------
# WebSocket
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_websocket_sends_snapshot_then_answers_lookups(client: test_utils.TestClient) -> None:
    async with client.ws_connect("/ws") as ws:
        snapshot = await _receive_json(ws)
        assert snapshot["type"] == "snapshot"
        entity_id = snapshot["data"]["entities"][0]["id"]

        await ws.send_str("garbage")
        await ws.send_str(json.dumps({"type": "get_entity", "id": entity_id}))
        detail = await _receive_json(ws)
        assert detail["type"] == "entity_detail"
        assert detail["data"]["id"] == entity_id

        await ws.send_str(json.dumps({"type": "get_entity", "id": "missing"}))
        assert await _receive_json(ws) == {"type": "entity_detail", "data": None}


@pytest.mark.asyncio
async def test_websocket_filter_control_pushes_snapshot(client: test_utils.TestClient) -> None:
    async with client.ws_connect("/ws") as ws:
        await _receive_json(ws)

        await ws.send_str(json.dumps({"type": "filter", "data": {"types": ["point-event"]}}))
        filtered = await _receive_json(ws)

        assert filtered["type"] == "snapshot"
        assert {entity["type"] for entity in filtered["data"]["entities"]} == {"point-event"}


@pytest.mark.asyncio
async def test_subscriber_count_follows_connections(client: test_utils.TestClient) -> None:
    async with client.ws_connect("/ws") as ws:
        await _receive_json(ws)
        health = await (await client.get("/api/health")).json()
        assert health["subscribers"] == 1

    # the handler unregisters once it sees the close frame
    for _ in range(50):
        health = await (await client.get("/api/health")).json()
        if health["subscribers"] == 0:
            break
    assert health["subscribers"] == 0


@pytest.mark.asyncio
async def test_app_builds_its_own_offline_pipeline() -> None:
    app = create_app(CONFIG)
    async with test_utils.TestClient(test_utils.TestServer(app)) as client:
        body = await (await client.get("/api/health")).json()

    assert body["entities"] > 0
    assert body["running"] is True


@dataclasses.dataclass
class FailingSocket:
    sent: int = 0
    closed: bool = False

    async def send_str(self, data: str) -> None:
        self.sent += 1
        raise ConnectionResetError("transport closing")

    async def close(self) -> None:
        self.closed = True


@pytest.mark.asyncio
async def test_sender_closes_socket_when_send_fails() -> None:
    subscriber = Subscriber(queue_size=4)
    subscriber.offer("frame-1")
    subscriber.offer("frame-2")
    socket = FailingSocket()

    await asyncio.wait_for(_pump(socket, subscriber), timeout=1.0)  # type: ignore[arg-type]

    assert socket.closed
    assert socket.sent == 1


@pytest.mark.asyncio
async def test_failed_send_disconnects_subscriber(
    client: test_utils.TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    original = web.WebSocketResponse.send_str

    async def _send_str(self: web.WebSocketResponse, data: str, compress: int | None = None) -> None:
        if data.startswith('{"type":"batch"'):
            raise ConnectionResetError("transport closing")
        await original(self, data, compress=compress)

    monkeypatch.setattr(web.WebSocketResponse, "send_str", _send_str)
    registry = client.app[RUNTIME_KEY].require().registry

    async with client.ws_connect("/ws") as ws:
        await _receive_json(ws)
        registry.publish(BatchMessage.compose(entities=[], anomalies=[], clusters=[]))
        msg = await ws.receive(timeout=5.0)
        assert msg.type in (aiohttp.WSMsgType.CLOSE, aiohttp.WSMsgType.CLOSED)

    for _ in range(50):
        health = await (await client.get("/api/health")).json()
        if health["subscribers"] == 0:
            break
    assert health["subscribers"] == 0
