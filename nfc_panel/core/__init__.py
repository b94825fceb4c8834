"""Core primitives for nfc-panel."""

from .errors import DeviceError, DeviceProtocolError, DeviceRequestError
from .models import DeviceStatus, ModeChangeResult, ReadResult
from .protocols import DeviceAdapter, PanelView
from .rendering import issuer_name, render_dump, render_uid

__all__ = [
    "DeviceAdapter",
    "DeviceError",
    "DeviceProtocolError",
    "DeviceRequestError",
    "DeviceStatus",
    "ModeChangeResult",
    "PanelView",
    "ReadResult",
    "issuer_name",
    "render_dump",
    "render_uid",
]
