import asyncio
from typing import Any, Optional, Union
from urllib.parse import parse_qs

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import unused_port

from nfc_panel.core import DeviceError, DeviceStatus, ModeChangeResult, ReadResult


class ReaderServer:
    """Scriptable stand-in for the reader's HTTP API."""

    def __init__(self, port: int) -> None:
        self._port = port
        self.status_payload: dict[str, Any] = {"mode": "idle", "uid": "", "dump": []}
        self.read_payload: dict[str, Any] = {"uid": "04A1B2C3", "data": [0, 255, 16]}
        self.status_http_status = 200
        self.status_raw_body: Optional[Union[str, bytes]] = None
        self.read_http_status = 200
        self.read_raw_body: Optional[bytes] = None
        self.read_delay = 0.0
        self.mode_http_status = 200
        self.requests: list[tuple[str, str]] = []
        self.mode_bodies: list[str] = []
        self.mode_content_types: list[str] = []

    def make_url(self, path: str = "/") -> str:
        if not path.startswith("/"):
            path = "/" + path
        return f"http://127.0.0.1:{self._port}{path}"

    def count(self, method: str, path: str) -> int:
        return self.requests.count((method, path))

    async def handle_status(self, request: web.Request) -> web.Response:
        self.requests.append((request.method, request.path))
        if self.status_http_status >= 400:
            return web.Response(status=self.status_http_status, text="status unavailable")
        if self.status_raw_body is not None:
            return _raw_json(self.status_raw_body)
        return web.json_response(self.status_payload)

    async def handle_read(self, request: web.Request) -> web.Response:
        self.requests.append((request.method, request.path))
        if self.read_delay:
            await asyncio.sleep(self.read_delay)
        if self.read_http_status >= 400:
            return web.Response(status=self.read_http_status, text="no card")
        if self.read_raw_body is not None:
            return _raw_json(self.read_raw_body)
        return web.json_response(self.read_payload)

    async def handle_mode(self, request: web.Request) -> web.Response:
        self.requests.append((request.method, request.path))
        body = await request.text()
        self.mode_bodies.append(body)
        self.mode_content_types.append(request.headers.get("Content-Type", ""))
        if self.mode_http_status >= 400:
            return web.Response(status=self.mode_http_status, text="unsupported mode")
        values = parse_qs(body).get("mode")
        if values:
            self.status_payload["mode"] = values[0]
        return web.Response(text="OK")


def _raw_json(body: Union[str, bytes]) -> web.Response:
    if isinstance(body, bytes):
        return web.Response(body=body, content_type="application/json")
    return web.Response(text=body, content_type="application/json")


@pytest_asyncio.fixture
async def reader_server():
    port = unused_port()
    server = ReaderServer(port)

    app = web.Application()
    app.router.add_get("/api/status", server.handle_status)
    app.router.add_post("/api/read", server.handle_read)
    app.router.add_post("/api/mode", server.handle_mode)

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", port)
    await site.start()

    try:
        yield server
    finally:
        await runner.cleanup()


class FakeDevice:
    """In-memory device adapter recording every call."""

    def __init__(self) -> None:
        self.status = DeviceStatus(mode="idle", uid=None, dump=b"")
        self.read_result = ReadResult(uid="04A1B2C3", data=bytes([0, 255, 16]))
        self.status_error: Optional[DeviceError] = None
        self.read_error: Optional[DeviceError] = None
        self.mode_ok = True
        self.calls: list[str] = []
        self.modes: list[str] = []
        self.closed = False

    def count(self, name: str) -> int:
        return self.calls.count(name)

    async def fetch_status(self) -> DeviceStatus:
        self.calls.append("status")
        if self.status_error is not None:
            raise self.status_error
        return self.status

    async def trigger_read(self) -> ReadResult:
        self.calls.append("read")
        if self.read_error is not None:
            raise self.read_error
        return self.read_result

    async def set_mode(self, mode: str) -> ModeChangeResult:
        self.calls.append("mode")
        self.modes.append(mode)
        if not self.mode_ok:
            return ModeChangeResult(mode=mode, ok=False, status=400, detail="HTTP 400")
        self.status = DeviceStatus(mode=mode, uid=self.status.uid, dump=self.status.dump)
        return ModeChangeResult(mode=mode, ok=True, status=200)

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_device() -> FakeDevice:
    return FakeDevice()
