"""Adapter modules for external integrations."""

from .device import FORM_CONTENT_TYPE, DeviceClient, encode_mode_form

__all__ = [
    "DeviceClient",
    "FORM_CONTENT_TYPE",
    "encode_mode_form",
]
