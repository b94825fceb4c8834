"""Text rendering rules for reader data."""

from __future__ import annotations

from typing import Iterable, Optional

from ..constants import UID_PLACEHOLDER

_ISSUERS = {
    0x04: "NXP",
    0x05: "Infineon",
    0x07: "Texas Instruments",
}


def render_dump(dump: Iterable[int]) -> str:
    """Render bytes as space separated, zero padded, lowercase hex pairs.

    >>> render_dump([0, 255, 16])
    '00 ff 10'
    """
    return " ".join(f"{value:02x}" for value in dump)


def render_uid(uid: Optional[str]) -> str:
    return uid if uid else UID_PLACEHOLDER


def issuer_name(uid: Optional[str]) -> str:
    """Return the chip manufacturer encoded in the first UID byte."""

    if not uid:
        return "Unknown"
    digits = uid.replace(":", "").replace(" ", "")[:2]
    if len(digits) < 2:
        return "Unknown"
    try:
        first = int(digits, 16)
    except ValueError:
        return "Unknown"
    return _ISSUERS.get(first, "Unknown")
