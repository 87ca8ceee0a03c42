"""aiohttp application exposing the pipeline.

Routes
------
``GET /ws``
    WebSocket. A full snapshot on connect, then every published message.
    Inbound frames are control messages; ``get_entity`` is answered on the
    same socket.
``GET /api/health``
    Liveness plus store and subscriber counts.
``GET /api/snapshot``
    Current filtered snapshot.
``GET /api/entity/{id}``
    One entity, 404 when unknown.
``POST /api/filters``
    Replace the active filter; answers with the new snapshot.
"""

from __future__ import annotations

import asyncio
import dataclasses
import json
import logging
from collections.abc import AsyncIterator

import aiohttp
from aiohttp import web
from pydantic import ValidationError

from pygeotrack._transport import HttpTransport
from pygeotrack.broadcast import Subscriber, encode_message
from pygeotrack.config import GeoTrackConfig
from pygeotrack.models import FilterCriteria
from pygeotrack.orchestrator import Orchestrator, build_orchestrator

_logger = logging.getLogger(__name__)


@dataclasses.dataclass
class _Runtime:
    config: GeoTrackConfig
    orchestrator: Orchestrator | None = None

    def require(self) -> Orchestrator:
        if self.orchestrator is None:
            raise web.HTTPServiceUnavailable(reason="pipeline not initialized")
        return self.orchestrator


RUNTIME_KEY = web.AppKey("runtime", _Runtime)


def _orchestrator(request: web.Request) -> Orchestrator:
    return request.app[RUNTIME_KEY].require()


# ------------------------------------------------------------------
# WebSocket
# ------------------------------------------------------------------


async def _pump(ws: web.WebSocketResponse, subscriber: Subscriber) -> None:
    """Drain *subscriber* into *ws*; a failed send closes the socket, ending the receive loop."""
    while True:
        frame = await subscriber.next_frame()
        try:
            await ws.send_str(frame)
        except Exception:
            _logger.warning("WebSocket subscriber %d send failed; closing", subscriber.id, exc_info=True)
            await ws.close()
            return


async def websocket_handler(request: web.Request) -> web.WebSocketResponse:
    orchestrator = _orchestrator(request)
    ws = web.WebSocketResponse(heartbeat=30.0)
    await ws.prepare(request)

    registry = orchestrator.registry
    subscriber = registry.register()
    sender = asyncio.create_task(_pump(ws, subscriber), name=f"pygeotrack-ws-{subscriber.id}")
    _logger.info("WebSocket subscriber %d connected from %s", subscriber.id, request.remote)
    try:
        await ws.send_str(encode_message(orchestrator.get_snapshot()))
        async for msg in ws:
            if msg.type == aiohttp.WSMsgType.TEXT:
                reply = orchestrator.handle_control(msg.data)
                if reply is not None:
                    await ws.send_str(encode_message(reply))
            elif msg.type == aiohttp.WSMsgType.ERROR:
                _logger.warning("WebSocket subscriber %d error: %s", subscriber.id, ws.exception())
    finally:
        registry.unregister(subscriber)
        sender.cancel()
        await asyncio.gather(sender, return_exceptions=True)
        _logger.info("WebSocket subscriber %d disconnected", subscriber.id)
    return ws


# ------------------------------------------------------------------
# HTTP API
# ------------------------------------------------------------------


async def health_handler(request: web.Request) -> web.Response:
    orchestrator = _orchestrator(request)
    store = orchestrator.store
    return web.json_response(
        {
            "status": "ok",
            "entities": len(store),
            "subscribers": len(orchestrator.registry),
            "paused": orchestrator.paused,
            "running": store.running,
            "liveCategories": sorted(category.value for category, live in store.live_capable.items() if live),
            "degradedCategories": sorted(category.value for category in store.degraded_categories),
        }
    )


async def snapshot_handler(request: web.Request) -> web.Response:
    return web.json_response(_orchestrator(request).get_snapshot().to_wire())


async def entity_handler(request: web.Request) -> web.Response:
    entity_id = request.match_info["entity_id"]
    entity = _orchestrator(request).get_entity(entity_id)
    if entity is None:
        return web.json_response({"error": f"entity {entity_id!r} not found"}, status=404)
    return web.json_response(entity.to_wire())


async def filters_handler(request: web.Request) -> web.Response:
    orchestrator = _orchestrator(request)
    try:
        payload = await request.json()
        criteria = FilterCriteria.model_validate(payload)
    except json.JSONDecodeError as exc:
        return web.json_response({"error": f"invalid JSON: {exc}"}, status=400)
    except ValidationError as exc:
        return web.json_response(
            {"error": "invalid filter criteria", "details": exc.errors(include_url=False)}, status=400
        )
    return web.json_response(orchestrator.set_filters(criteria).to_wire())


# ------------------------------------------------------------------
# Application
# ------------------------------------------------------------------


def create_app(config: GeoTrackConfig | None = None, *, orchestrator: Orchestrator | None = None) -> web.Application:
    """Build the application.

    Parameters
    ----------
    config : GeoTrackConfig, optional
        Defaults to :meth:`GeoTrackConfig.from_env`.
    orchestrator : Orchestrator, optional
        Prebuilt pipeline (tests). When omitted one is built on startup,
        with an HTTP transport if live sources are enabled.
    """
    config = config or GeoTrackConfig.from_env()
    runtime = _Runtime(config=config, orchestrator=orchestrator)

    app = web.Application()
    app[RUNTIME_KEY] = runtime
    app.router.add_get("/ws", websocket_handler)
    app.router.add_get("/api/health", health_handler)
    app.router.add_get("/api/snapshot", snapshot_handler)
    app.router.add_get("/api/entity/{entity_id}", entity_handler)
    app.router.add_post("/api/filters", filters_handler)

    async def _pipeline(app: web.Application) -> AsyncIterator[None]:
        session: aiohttp.ClientSession | None = None
        if runtime.orchestrator is None:
            transport = None
            if config.live_sources_enabled:
                session = aiohttp.ClientSession()
                transport = HttpTransport(session)
            runtime.orchestrator = build_orchestrator(config, transport)
        try:
            await runtime.orchestrator.initialize()
            runtime.orchestrator.start()
            yield
        finally:
            await runtime.orchestrator.stop()
            if session is not None:
                await session.close()

    app.cleanup_ctx.append(_pipeline)
    return app
