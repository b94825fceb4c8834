"""Render targets for :class:`~nfc_panel.panel.PanelState`."""

from __future__ import annotations

import sys
from typing import Dict, Optional, TextIO

from .constants import CURRENT_MODE, DUMP_AREA, LAST_UID
from .panel import PanelState

_LABELS = {
    CURRENT_MODE: "Mode",
    LAST_UID: "UID",
    DUMP_AREA: "Dump",
}


class ElementView:
    """Text nodes keyed by element id, as a host page would hold them."""

    def __init__(self) -> None:
        self.text: Dict[str, str] = {key: "" for key in _LABELS}
        self.renders = 0

    def render(self, state: PanelState) -> None:
        self.text.update(state.elements())
        self.renders += 1

    def __getitem__(self, element_id: str) -> str:
        return self.text[element_id]


class ConsoleView:
    """Print element changes and feedback lines to a text stream."""

    def __init__(self, stream: Optional[TextIO] = None, *, show_issuer: bool = True) -> None:
        self._stream = stream
        self._show_issuer = show_issuer
        self._last: Optional[PanelState] = None

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    def render(self, state: PanelState) -> None:
        previous = self._last
        self._last = state

        previous_elements = previous.elements() if previous is not None else {}
        for element_id, text in state.elements().items():
            if previous_elements.get(element_id) == text:
                continue
            self._write(f"{_LABELS[element_id]:>6}: {text}")
            if element_id == LAST_UID and self._show_issuer and state.issuer != "Unknown":
                self._write(f"{'Issuer':>6}: {state.issuer}")

        if state.notice and (previous is None or previous.notice != state.notice):
            self._write(f"  ! {state.notice}")
        if state.refresh_error and (previous is None or previous.refresh_error != state.refresh_error):
            self._write(f"  ! {state.refresh_error}")

    def show(self, state: PanelState) -> None:
        """Print the full state regardless of what changed."""

        for element_id, text in state.elements().items():
            self._write(f"{_LABELS[element_id]:>6}: {text}")
        if self._show_issuer:
            self._write(f"{'Issuer':>6}: {state.issuer}")
        for line in (state.notice, state.refresh_error):
            if line:
                self._write(f"  ! {line}")

    def _write(self, line: str) -> None:
        self.stream.write(line + "\n")
        self.stream.flush()
