"""Protocol definitions for reader adapters and render targets."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from .models import DeviceStatus, ModeChangeResult, ReadResult

if TYPE_CHECKING:
    from ..panel import PanelState


class DeviceAdapter(Protocol):
    """Minimal contract for components that talk to the reader."""

    async def fetch_status(self) -> DeviceStatus:
        """Retrieve the current device status snapshot.

        Raises:
            DeviceError: If the request fails or the payload is malformed.
        """
        ...

    async def trigger_read(self) -> ReadResult:
        """Ask the reader to read the card in its field.

        Raises:
            DeviceError: If the request fails or the payload is malformed.
        """
        ...

    async def set_mode(self, mode: str) -> ModeChangeResult:
        """Send a mode change; failures are reported in the result, not raised."""
        ...

    async def aclose(self) -> None:
        """Close any underlying resources."""
        ...


class PanelView(Protocol):
    """Render target driven by :class:`~nfc_panel.panel.PanelState`."""

    def render(self, state: "PanelState") -> None:
        ...
