"""Exceptions raised while talking to the reader."""

from __future__ import annotations


class DeviceError(Exception):
    """Base class for reader communication failures.

    ``str(exc)`` is the short detail shown to the user, e.g. ``"timeout"``.
    """


class DeviceRequestError(DeviceError):
    """The request could not be completed (transport failure, timeout, HTTP error)."""

    def __init__(self, detail: str, *, status: int | None = None) -> None:
        super().__init__(detail)
        self.status = status


class DeviceProtocolError(DeviceError):
    """The reader answered with a payload that does not match the expected shape."""
