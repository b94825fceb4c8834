"""Main application entry-point for nfc-panel."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TextIO

from .adapters import DeviceClient
from .config import PanelConfig, load_config
from .core import DeviceAdapter, DeviceStatus
from .health import HealthServer
from .logging import configure_logging
from .panel import StatusPanel
from .polling import RefreshPoller
from .shell import LineReader, PanelShell
from .views import ConsoleView

LOGGER = logging.getLogger(__name__)

DEFAULT_WATCH_INTERVAL_SECONDS = 5.0


class PanelApp:
    """Wires the device client, panel, views and optional background services.

    Every run begins the way the web page does: one status refresh on load.
    The device adapter can be injected for testing.
    """

    def __init__(
        self,
        config: Optional[PanelConfig] = None,
        *,
        device: Optional[DeviceAdapter] = None,
        stream: Optional[TextIO] = None,
    ) -> None:
        self._config = config or load_config()
        self._device: DeviceAdapter = device or DeviceClient(self._config.device)
        self._view = ConsoleView(stream)
        self._panel = StatusPanel(
            self._device,
            refresh_errors=self._config.panel.refresh_errors,
            mode_refresh=self._config.panel.mode_refresh,
        )
        self._poller: Optional[RefreshPoller] = None
        self._health_server: Optional[HealthServer] = None

    @property
    def panel(self) -> StatusPanel:
        return self._panel

    @property
    def view(self) -> ConsoleView:
        return self._view

    # ------------------------------------------------------------------
    # One-shot commands
    # ------------------------------------------------------------------
    async def run_status(self) -> int:
        try:
            status = await self._load()
            self._view.show(self._panel.state)
            if status is None:
                self._report_refresh_failure()
                return 1
            return 0
        finally:
            await self.aclose()

    async def run_read(self) -> int:
        try:
            await self._load()
            result = await self._panel.trigger_read()
            self._view.show(self._panel.state)
            return 0 if result is not None else 1
        finally:
            await self.aclose()

    async def run_mode(self, mode: str) -> int:
        try:
            await self._load()
            result = await self._panel.set_mode(mode)
            self._view.show(self._panel.state)
            return 0 if result.ok else 1
        finally:
            await self.aclose()

    # ------------------------------------------------------------------
    # Long-running commands
    # ------------------------------------------------------------------
    async def run_watch(
        self,
        *,
        interval_seconds: Optional[float] = None,
        stop_event: Optional[asyncio.Event] = None,
    ) -> int:
        stop_event = stop_event or asyncio.Event()
        interval = (
            interval_seconds
            or self._config.polling.interval_seconds
            or DEFAULT_WATCH_INTERVAL_SECONDS
        )

        self._panel.attach(self._view)
        try:
            await self._start_services(interval)
            await self._load()
            await stop_event.wait()
        finally:
            await self.aclose()
        return 0

    async def run_shell(self, *, read_line: Optional[LineReader] = None) -> int:
        shell = PanelShell(
            self._panel,
            self._view,
            selected_mode=self._config.panel.default_mode,
            read_line=read_line,
        )

        self._panel.attach(self._view)
        try:
            interval = self._config.polling.interval_seconds
            await self._start_services(interval if interval > 0 else None)
            await self._load()
            await shell.run()
        finally:
            await self.aclose()
        return 0

    async def aclose(self) -> None:
        if self._poller is not None:
            await self._poller.stop()
            self._poller = None
        if self._health_server is not None:
            await self._health_server.stop()
            self._health_server = None
        await self._device.aclose()

    @classmethod
    def start(
        cls,
        config: PanelConfig,
        runner: Callable[["PanelApp"], Awaitable[int]],
    ) -> int:
        configure_logging(
            config.logging.level,
            log_path=config.logging.path,
            log_network=config.logging.log_network,
        )
        instance = cls(config)
        try:
            return asyncio.run(runner(instance))
        except KeyboardInterrupt:
            LOGGER.info("nfc-panel received shutdown signal")
            return 0

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    async def _load(self) -> Optional[DeviceStatus]:
        LOGGER.debug("Loading status from %s", self._config.device.url)
        return await self._panel.refresh_status()

    async def _start_services(self, poll_interval: Optional[float]) -> None:
        if self._config.health.enabled:
            self._health_server = HealthServer(
                self._panel, self._config.health.host, self._config.health.port
            )
            await self._health_server.start()

        if poll_interval:
            self._poller = RefreshPoller(
                refresh=self._panel.poll_status,
                interval_seconds=poll_interval,
            )
            self._poller.start()

    def _report_refresh_failure(self) -> None:
        if self._panel.state.refresh_error:
            return  # already shown by the view
        detail = self._panel.last_refresh_error or "unknown error"
        self._view.stream.write(f"Status refresh failed: {detail}\n")
