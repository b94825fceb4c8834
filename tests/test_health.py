import aiohttp
import pytest

from nfc_panel.core import DeviceRequestError, DeviceStatus
from nfc_panel.health import HealthServer
from nfc_panel.panel import StatusPanel


def test_snapshot_before_first_refresh(fake_device):
    server = HealthServer(StatusPanel(fake_device))

    snapshot = server.snapshot()

    assert snapshot["status"] == "degraded"
    assert snapshot["components"][0]["name"] == "device"
    assert snapshot["components"][0]["detail"] == "no refresh yet"


@pytest.mark.asyncio
async def test_snapshot_tracks_last_refresh(fake_device):
    fake_device.status = DeviceStatus(mode="read", uid="A1B2", dump=b"")
    panel = StatusPanel(fake_device)
    server = HealthServer(panel)

    await panel.refresh_status()
    assert server.snapshot()["status"] == "ok"

    fake_device.status_error = DeviceRequestError("timeout")
    await panel.poll_status()
    snapshot = server.snapshot()

    assert snapshot["status"] == "degraded"
    assert snapshot["components"][0]["detail"] == "timeout"
    assert snapshot["panel"]["mode"] == "read"
    assert snapshot["panel"]["uid"] == "A1B2"


@pytest.mark.asyncio
async def test_health_server_serves_snapshot_on_ephemeral_port(fake_device):
    panel = StatusPanel(fake_device)
    server = HealthServer(panel, "127.0.0.1", 0)
    await server.start()

    try:
        url = f"http://127.0.0.1:{server.port}/healthz"
        async with aiohttp.ClientSession() as session:
            async with session.get(url) as response:
                assert response.status == 503

            await panel.refresh_status()
            async with session.get(url) as response:
                payload = await response.json()
                assert response.status == 200
                assert payload["status"] == "ok"
                assert payload["panel"]["mode"] == "idle"
    finally:
        await server.stop()

    assert server.port is None
