"""Tests for the reader HTTP adapter."""

import pytest
from aiohttp.test_utils import unused_port

from nfc_panel.adapters import FORM_CONTENT_TYPE, DeviceClient, encode_mode_form
from nfc_panel.config import DeviceConfig
from nfc_panel.core import (
    DeviceProtocolError,
    DeviceRequestError,
    DeviceStatus,
    ReadResult,
)


def test_encode_mode_form_matches_uri_component_encoding():
    assert encode_mode_form("write") == "mode=write"
    assert encode_mode_form("fast read") == "mode=fast%20read"
    assert encode_mode_form("a&b=c") == "mode=a%26b%3Dc"
    assert encode_mode_form("it's(ok)!*~") == "mode=it's(ok)!*~"
    assert encode_mode_form("é") == "mode=%C3%A9"


@pytest.mark.asyncio
async def test_fetch_status_parses_snapshot(reader_server):
    reader_server.status_payload = {"mode": "read", "uid": "A1B2", "dump": [0, 255, 16]}
    client = DeviceClient(DeviceConfig(url=reader_server.make_url("/")))

    status = await client.fetch_status()
    await client.aclose()

    assert status == DeviceStatus(mode="read", uid="A1B2", dump=bytes([0, 255, 16]))
    assert reader_server.requests == [("GET", "/api/status")]


@pytest.mark.asyncio
async def test_trigger_read_posts_and_parses_result(reader_server):
    client = DeviceClient(DeviceConfig(url=reader_server.make_url("/")))

    result = await client.trigger_read()
    await client.aclose()

    assert result == ReadResult(uid="04A1B2C3", data=bytes([0, 255, 16]))
    assert reader_server.requests == [("POST", "/api/read")]


@pytest.mark.asyncio
async def test_set_mode_sends_exact_form_body(reader_server):
    client = DeviceClient(DeviceConfig(url=reader_server.make_url("/")))

    result = await client.set_mode("write")
    await client.aclose()

    assert result.ok is True
    assert result.status == 200
    assert reader_server.mode_bodies == ["mode=write"]
    assert reader_server.mode_content_types[0].startswith(FORM_CONTENT_TYPE)
    assert reader_server.status_payload["mode"] == "write"


@pytest.mark.asyncio
async def test_set_mode_reports_rejection(reader_server):
    reader_server.mode_http_status = 400
    client = DeviceClient(DeviceConfig(url=reader_server.make_url("/")))

    result = await client.set_mode("sleep")
    await client.aclose()

    assert result.ok is False
    assert result.status == 400
    assert result.detail == "HTTP 400: unsupported mode"


@pytest.mark.asyncio
async def test_http_error_raises_request_error(reader_server):
    reader_server.read_http_status = 500
    client = DeviceClient(DeviceConfig(url=reader_server.make_url("/")))

    with pytest.raises(DeviceRequestError) as excinfo:
        await client.trigger_read()
    await client.aclose()

    assert excinfo.value.status == 500
    assert str(excinfo.value) == "HTTP 500: no card"


@pytest.mark.asyncio
async def test_invalid_json_raises_protocol_error(reader_server):
    reader_server.status_raw_body = "<html>not json</html>"
    client = DeviceClient(DeviceConfig(url=reader_server.make_url("/")))

    with pytest.raises(DeviceProtocolError, match="invalid JSON"):
        await client.fetch_status()
    await client.aclose()


@pytest.mark.asyncio
async def test_timeout_detail_is_timeout(reader_server):
    reader_server.read_delay = 1.0
    client = DeviceClient(
        DeviceConfig(url=reader_server.make_url("/"), request_timeout_seconds=0.05)
    )

    with pytest.raises(DeviceRequestError) as excinfo:
        await client.trigger_read()
    await client.aclose()

    assert str(excinfo.value) == "timeout"


@pytest.mark.asyncio
async def test_unreachable_device_raises_request_error():
    client = DeviceClient(DeviceConfig(url=f"http://127.0.0.1:{unused_port()}"))

    with pytest.raises(DeviceRequestError):
        await client.fetch_status()

    result = await client.set_mode("read")
    await client.aclose()

    assert result.ok is False
    assert result.detail


@pytest.mark.asyncio
async def test_undecodable_body_raises_protocol_error(reader_server):
    reader_server.status_raw_body = b'{"mode":"\xff\xfe"}'
    client = DeviceClient(DeviceConfig(url=reader_server.make_url("/")))

    with pytest.raises(DeviceProtocolError, match="invalid JSON from /api/status"):
        await client.fetch_status()
    await client.aclose()


@pytest.mark.asyncio
async def test_set_mode_with_unencodable_mode_is_not_sent(reader_server):
    client = DeviceClient(DeviceConfig(url=reader_server.make_url("/")))

    result = await client.set_mode("\ud800")
    await client.aclose()

    assert result.ok is False
    assert result.detail == "mode cannot be encoded"
    assert reader_server.mode_bodies == []
