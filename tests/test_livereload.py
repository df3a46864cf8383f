# tests/test_livereload.py

from __future__ import annotations

import aiohttp
import pytest

from pipewright.adapters.livereload import PROTOCOL_7, AiohttpLiveReloadServer
from pipewright.errors import PipelineError


@pytest.mark.asyncio
async def test_handshake_and_reload() -> None:
    server = AiohttpLiveReloadServer("127.0.0.1", 0)
    await server.start()
    try:
        base = f"http://127.0.0.1:{server.port}"
        async with aiohttp.ClientSession() as session:
            async with session.ws_connect(f"{base}/livereload") as ws:
                await ws.send_json({"command": "hello", "protocols": [PROTOCOL_7]})
                hello = await ws.receive_json(timeout=5)
                assert hello["command"] == "hello"
                assert PROTOCOL_7 in hello["protocols"]
                assert server.client_count == 1

                assert await server.reload("tmp/__spec-build.js") == 1
                msg = await ws.receive_json(timeout=5)
                assert msg == {"command": "reload", "path": "tmp/__spec-build.js", "liveCSS": True}

                async with session.get(f"{base}/changed", params={"files": "a.js"}) as resp:
                    body = await resp.json()
                assert body == {"clients": 1, "files": ["a.js"]}
                msg = await ws.receive_json(timeout=5)
                assert msg["path"] == "a.js"
    finally:
        await server.stop()

    assert not server.started


@pytest.mark.asyncio
async def test_reload_without_clients() -> None:
    server = AiohttpLiveReloadServer("127.0.0.1", 0)
    await server.start()
    await server.start()  # idempotent
    try:
        assert server.started
        assert await server.reload("x.js") == 0
    finally:
        await server.stop()
    await server.stop()


@pytest.mark.asyncio
async def test_port_in_use_is_a_pipeline_error() -> None:
    first = AiohttpLiveReloadServer("127.0.0.1", 0)
    await first.start()
    try:
        second = AiohttpLiveReloadServer("127.0.0.1", first.port)
        with pytest.raises(PipelineError) as excinfo:
            await second.start()
        assert f"127.0.0.1:{first.port}" in str(excinfo.value)
        assert not second.started
    finally:
        await first.stop()
