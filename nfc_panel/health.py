"""``/healthz`` endpoint for a running panel.

The reader counts as reachable while the panel's last status refresh (user
triggered or polled) succeeded. Before the first refresh it is reported as
degraded.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, Optional

from aiohttp import web

from .panel import StatusPanel

LOGGER = logging.getLogger(__name__)


class HealthServer:
    """Serves the panel's reachability and rendered state over HTTP."""

    def __init__(self, panel: StatusPanel, host: str = "127.0.0.1", port: int = 0) -> None:
        self._panel = panel
        self._host = host
        self._port = port
        self._app = web.Application()
        self._app.router.add_get("/healthz", self._handle_health)
        self._runner: Optional[web.AppRunner] = None

    @property
    def port(self) -> Optional[int]:
        """Bound port once started; resolves ``port=0`` to the real one."""
        if self._runner is None or not self._runner.addresses:
            return None
        return self._runner.addresses[0][1]

    def snapshot(self) -> Dict[str, object]:
        reachable = self._panel.last_refresh_ok
        if reachable is None:
            detail: Optional[str] = "no refresh yet"
        elif reachable:
            detail = None
        else:
            detail = self._panel.last_refresh_error

        device = {
            "name": "device",
            "healthy": bool(reachable),
            "detail": detail,
            "checkedAt": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        }
        return {
            "status": "ok" if reachable else "degraded",
            "components": [device],
            "panel": self._panel.state.as_dict(),
        }

    async def start(self) -> None:
        if self._runner is not None:
            return
        runner = web.AppRunner(self._app, access_log=None)
        await runner.setup()
        await web.TCPSite(runner, self._host, self._port).start()
        self._runner = runner
        LOGGER.info("Health endpoint listening on http://%s:%s/healthz", self._host, self.port)

    async def stop(self) -> None:
        if self._runner is None:
            return
        runner, self._runner = self._runner, None
        await runner.cleanup()

    async def _handle_health(self, request: web.Request) -> web.Response:
        snapshot = self.snapshot()
        return web.json_response(snapshot, status=200 if snapshot["status"] == "ok" else 503)
