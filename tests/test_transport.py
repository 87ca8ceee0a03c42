from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

import aiohttp
import pytest
import pytest_asyncio
from aiohttp import test_utils, web

from pygeotrack._transport import HttpTransport
from pygeotrack.exceptions import SourceFormatError, SourceUnavailableError


async def _ok(request: web.Request) -> web.Response:
    assert request.headers["user-agent"].startswith("pygeotrack/")
    return web.json_response({"ac": []})


async def _broken_json(request: web.Request) -> web.Response:
    return web.Response(text="<html>maintenance</html>")


async def _undecodable(request: web.Request) -> web.Response:
    return web.Response(body=b'{"ac": ["\xff\xfe"]}', content_type="application/json", charset="utf-8")


async def _server_error(request: web.Request) -> web.Response:
    return web.Response(status=503, text="busy")


async def _slow(request: web.Request) -> web.Response:
    await asyncio.sleep(1.0)
    return web.json_response({})


@pytest_asyncio.fixture
async def server() -> AsyncIterator[test_utils.TestServer]:
    app = web.Application()
    app.router.add_get("/ok", _ok)
    app.router.add_get("/broken", _broken_json)
    app.router.add_get("/error", _server_error)
    app.router.add_get("/undecodable", _undecodable)
    app.router.add_get("/slow", _slow)
    async with test_utils.TestServer(app) as test_server:
        yield test_server


@pytest.mark.asyncio
async def test_get_json_success(server: test_utils.TestServer) -> None:
    async with aiohttp.ClientSession() as session:
        transport = HttpTransport(session)
        assert await transport.get_json(str(server.make_url("/ok")), source="test") == {"ac": []}


@pytest.mark.asyncio
async def test_non_200_maps_to_source_unavailable(server: test_utils.TestServer) -> None:
    async with aiohttp.ClientSession() as session:
        transport = HttpTransport(session)
        with pytest.raises(SourceUnavailableError) as excinfo:
            await transport.get_json(str(server.make_url("/error")), source="test")
    assert excinfo.value.status_code == 503
    assert excinfo.value.source == "test"
    assert not isinstance(excinfo.value, SourceFormatError)


@pytest.mark.asyncio
async def test_invalid_json_maps_to_format_error(server: test_utils.TestServer) -> None:
    async with aiohttp.ClientSession() as session:
        transport = HttpTransport(session)
        with pytest.raises(SourceFormatError):
            await transport.get_json(str(server.make_url("/broken")), source="test")


@pytest.mark.asyncio
async def test_undecodable_body_maps_to_format_error(server: test_utils.TestServer) -> None:
    async with aiohttp.ClientSession() as session:
        transport = HttpTransport(session)
        with pytest.raises(SourceFormatError) as excinfo:
            await transport.get_json(str(server.make_url("/undecodable")), source="adsb.lol")
    assert excinfo.value.source == "adsb.lol"
    assert isinstance(excinfo.value.__cause__, UnicodeDecodeError)


@pytest.mark.asyncio
async def test_connection_error_maps_to_source_unavailable() -> None:
    async with aiohttp.ClientSession() as session:
        transport = HttpTransport(session)
        with pytest.raises(SourceUnavailableError):
            # port 1 is never listening
            await transport.get_text("http://127.0.0.1:1/", source="test", timeout=2.0)


@pytest.mark.asyncio
async def test_cancellation_by_outer_timeout(server: test_utils.TestServer) -> None:
    async with aiohttp.ClientSession() as session:
        transport = HttpTransport(session)
        with pytest.raises(TimeoutError):
            async with asyncio.timeout(0.05):
                await transport.get_json(str(server.make_url("/slow")), source="test")
        # the pool is still usable afterwards
        assert await transport.get_json(str(server.make_url("/ok")), source="test") == {"ac": []}
