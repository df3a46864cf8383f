# src/pipewright/adapters/livereload.py

"""
LiveReload listener on aiohttp.

Speaks the LiveReload protocol (the one browser extensions and livereload.js
use) over ws://host:port/livereload:

    client -> {"command": "hello", "protocols": [...]}
    server -> {"command": "hello", "protocols": [...], "serverName": ...}
    server -> {"command": "reload", "path": "...", "liveCSS": true}

External tools can also trigger reloads with GET/POST /changed?files=a,b.
"""

from __future__ import annotations

import contextlib
import json
import logging

from aiohttp import WSMsgType, web

from .. import __version__
from ..errors import ToolError

logger = logging.getLogger(__name__)

PROTOCOL_7 = "http://livereload.com/protocols/official-7"
SERVER_NAME = "pipewright"


def hello_message() -> dict[str, object]:
    return {"command": "hello", "protocols": [PROTOCOL_7], "serverName": SERVER_NAME}


def reload_message(path: str) -> dict[str, object]:
    return {"command": "reload", "path": path, "liveCSS": True}


class AiohttpLiveReloadServer:
    def __init__(self, host: str = "localhost", port: int = 35729) -> None:
        self._host = host
        self._port = port
        self._clients: set[web.WebSocketResponse] = set()
        self._runner: web.AppRunner | None = None

    @property
    def started(self) -> bool:
        return self._runner is not None

    @property
    def port(self) -> int:
        """Bound port (differs from the configured one only when that was 0)."""
        if self._runner is not None:
            for addr in self._runner.addresses:
                if isinstance(addr, tuple) and len(addr) >= 2:
                    return int(addr[1])
        return self._port

    @property
    def client_count(self) -> int:
        return len(self._clients)

    def _app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/", self._handle_index)
        app.router.add_get("/livereload", self._handle_ws)
        app.router.add_route("*", "/changed", self._handle_changed)
        return app

    async def start(self) -> None:
        if self._runner is not None:
            return
        runner = web.AppRunner(self._app(), access_log=None)
        await runner.setup()
        site = web.TCPSite(runner, self._host, self._port)
        try:
            await site.start()
        except OSError as e:
            await runner.cleanup()
            raise ToolError("livereload", None, f"cannot listen on {self._host}:{self._port}: {e}") from e
        self._runner = runner
        logger.info("Live reload listening on %s:%d", self._host, self.port)

    async def stop(self) -> None:
        runner, self._runner = self._runner, None
        if runner is None:
            return
        for ws in list(self._clients):
            with contextlib.suppress(Exception):
                await ws.close()
        self._clients.clear()
        await runner.cleanup()
        logger.debug("Live reload listener stopped")

    async def reload(self, path: str) -> int:
        message = reload_message(path)
        sent = 0
        for ws in list(self._clients):
            if ws.closed:
                self._clients.discard(ws)
                continue
            try:
                await ws.send_json(message)
                sent += 1
            except ConnectionResetError:
                self._clients.discard(ws)
        logger.debug("reload %s -> %d client(s)", path, sent)
        return sent

    async def _handle_index(self, request: web.Request) -> web.Response:
        return web.json_response({"server": SERVER_NAME, "version": __version__, "clients": len(self._clients)})

    async def _handle_ws(self, request: web.Request) -> web.WebSocketResponse:
        ws = web.WebSocketResponse()
        await ws.prepare(request)
        self._clients.add(ws)
        logger.info("Live reload client connected (%d total)", len(self._clients))
        try:
            async for msg in ws:
                if msg.type != WSMsgType.TEXT:
                    continue
                try:
                    data = json.loads(msg.data)
                except json.JSONDecodeError:
                    logger.debug("Ignoring non-JSON live reload message: %r", msg.data)
                    continue
                if isinstance(data, dict) and data.get("command") == "hello":
                    await ws.send_json(hello_message())
        finally:
            self._clients.discard(ws)
            logger.debug("Live reload client disconnected")
        return ws

    async def _handle_changed(self, request: web.Request) -> web.Response:
        files: list[str] = []
        raw = request.query.get("files", "")
        files += [f.strip() for f in raw.split(",") if f.strip()]
        if request.method == "POST" and request.can_read_body:
            with contextlib.suppress(json.JSONDecodeError, UnicodeDecodeError):
                body = await request.json()
                if isinstance(body, dict) and isinstance(body.get("files"), list):
                    files += [str(f) for f in body["files"]]

        notified = 0
        for path in files:
            notified = max(notified, await self.reload(path))
        return web.json_response({"clients": notified, "files": files})
