"""Snapshots reported by the reader and the outcome of commands sent to it."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .errors import DeviceProtocolError


def _coerce_bytes(value: Any, field_name: str) -> bytes:
    if value is None:
        return b""
    if not isinstance(value, (list, tuple)):
        raise DeviceProtocolError(f"{field_name} must be a list of bytes")
    for item in value:
        # bool is an int subclass but never a byte value on the wire
        if isinstance(item, bool) or not isinstance(item, int) or not 0 <= item <= 255:
            raise DeviceProtocolError(f"{field_name} contains invalid byte {item!r}")
    return bytes(value)


def _coerce_uid(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise DeviceProtocolError(f"uid must be a string, got {type(value).__name__}")
    return value


def _require_mapping(payload: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise DeviceProtocolError(f"{what} payload must be a JSON object")
    return payload


@dataclass(slots=True, frozen=True)
class DeviceStatus:
    """Snapshot from ``/api/status``."""

    mode: str
    uid: Optional[str] = None
    dump: bytes = b""

    @classmethod
    def from_payload(cls, payload: Any) -> "DeviceStatus":
        data = _require_mapping(payload, "status")
        mode = data.get("mode")
        if mode is None:
            raise DeviceProtocolError("status payload is missing 'mode'")
        return cls(
            mode=str(mode),
            uid=_coerce_uid(data.get("uid")),
            dump=_coerce_bytes(data.get("dump"), "dump"),
        )


@dataclass(slots=True, frozen=True)
class ReadResult:
    """Result of ``/api/read``; carries no mode."""

    uid: Optional[str]
    data: bytes

    @classmethod
    def from_payload(cls, payload: Any) -> "ReadResult":
        data = _require_mapping(payload, "read")
        if "data" not in data:
            raise DeviceProtocolError("read payload is missing 'data'")
        return cls(
            uid=_coerce_uid(data.get("uid")),
            data=_coerce_bytes(data["data"], "data"),
        )


@dataclass(slots=True, frozen=True)
class ModeChangeResult:
    mode: str
    ok: bool
    status: Optional[int] = None
    detail: Optional[str] = None
