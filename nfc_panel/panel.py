"""Local view of the reader's state and the commands that change it.

The panel keeps an explicit :class:`PanelState` and pushes every change to its
attached views. Views never hold state of their own.

Commands may overlap (a refresh still in flight when a read is issued, for
example). Every update takes a sequence number when its command is issued and
is applied only if nothing newer has been applied since, so the final render
always follows the most recent user action rather than the slowest response.

Background polls are not user actions and never take a sequence number. A poll
is skipped while any command is in flight, and its snapshot is dropped if a
command was issued before it returned.
"""

from __future__ import annotations

import contextlib
import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, Iterator, Optional

from .config import MODE_REFRESH_POLICIES, REFRESH_ERROR_POLICIES, ConfigurationError
from .constants import (
    CURRENT_MODE,
    DUMP_AREA,
    KNOWN_MODES,
    LAST_UID,
    READING_PLACEHOLDER,
    UID_PLACEHOLDER,
)
from .core import (
    DeviceAdapter,
    DeviceError,
    DeviceStatus,
    ModeChangeResult,
    PanelView,
    ReadResult,
    issuer_name,
    render_dump,
    render_uid,
)

LOGGER = logging.getLogger(__name__)

__all__ = ["PanelState", "StatusPanel"]


@dataclass(slots=True, frozen=True)
class PanelState:
    """Rendered text of every output element plus feedback lines."""

    mode: str = ""
    uid: str = UID_PLACEHOLDER
    dump: str = ""
    issuer: str = "Unknown"
    notice: Optional[str] = None
    refresh_error: Optional[str] = None

    def elements(self) -> Dict[str, str]:
        """Text for each output element id of the host page."""

        return {
            CURRENT_MODE: self.mode,
            LAST_UID: self.uid,
            DUMP_AREA: self.dump,
        }

    def as_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode,
            "uid": self.uid,
            "dump": self.dump,
            "issuer": self.issuer,
            "notice": self.notice,
            "refreshError": self.refresh_error,
        }


class StatusPanel:
    """Keeps the local view in sync with the reader."""

    def __init__(
        self,
        device: DeviceAdapter,
        views: Iterable[PanelView] = (),
        *,
        refresh_errors: str = "silent",
        mode_refresh: str = "always",
    ) -> None:
        if refresh_errors not in REFRESH_ERROR_POLICIES:
            raise ConfigurationError(f"Unknown refresh error policy: {refresh_errors!r}")
        if mode_refresh not in MODE_REFRESH_POLICIES:
            raise ConfigurationError(f"Unknown mode refresh policy: {mode_refresh!r}")

        self._device = device
        self._views: list[PanelView] = list(views)
        self._refresh_errors = refresh_errors
        self._mode_refresh = mode_refresh
        self._state = PanelState()
        self._issued = 0
        self._applied = 0
        self._in_flight = 0
        self._last_refresh_ok: Optional[bool] = None
        self._last_refresh_error: Optional[str] = None

    @property
    def state(self) -> PanelState:
        return self._state

    @property
    def last_refresh_ok(self) -> Optional[bool]:
        """``None`` until the first refresh completes."""
        return self._last_refresh_ok

    @property
    def last_refresh_error(self) -> Optional[str]:
        return self._last_refresh_error

    def attach(self, view: PanelView) -> None:
        """Add a view; it is rendered on the next applied update."""
        self._views.append(view)


    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    async def refresh_status(self) -> Optional[DeviceStatus]:
        """Replace mode, UID and dump from a fresh status snapshot.

        A failed refresh never touches the rendered elements. Under the
        ``notice`` policy the failure is additionally shown as a feedback line.
        """

        with self._command():
            sequence = self._next_sequence()
            status = await self._fetch_status()
            if status is None:
                if self._refresh_errors == "notice":
                    self._apply(sequence, refresh_error=self._refresh_notice())
                return None

            self._apply(sequence, **_status_changes(status))
            return status

    async def poll_status(self) -> Optional[DeviceStatus]:
        """Background refresh that yields to user commands.

        Returns the snapshot only when it was rendered.
        """

        if self._in_flight:
            LOGGER.debug("Skipping status poll, %d command(s) in flight", self._in_flight)
            return None

        issued = self._issued
        status = await self._fetch_status()
        if self._in_flight or self._issued != issued:
            LOGGER.debug("Discarding status poll overtaken by command #%d", self._issued)
            return None

        if status is None:
            if self._refresh_errors == "notice":
                self._render(refresh_error=self._refresh_notice())
            return None

        self._render(**_status_changes(status))
        return status

    async def trigger_read(self) -> Optional[ReadResult]:
        """Read the card in the field; returns ``None`` if the read failed."""

        with self._command():
            self._apply(self._next_sequence(), dump=READING_PLACEHOLDER)
            sequence = self._next_sequence()
            try:
                result = await self._device.trigger_read()
            except DeviceError as exc:
                LOGGER.warning("Card read failed: %s", exc)
                self._apply(sequence, dump=f"Error: {exc}")
                return None

            LOGGER.info("Read card %s (%d bytes)", result.uid or "<no uid>", len(result.data))
            self._apply(
                sequence,
                uid=render_uid(result.uid),
                dump=render_dump(result.data),
                issuer=issuer_name(result.uid),
                notice=None,
            )
            return result

    async def set_mode(self, mode: str) -> ModeChangeResult:
        """Switch the reader mode, then resynchronise per the mode refresh policy."""

        if mode not in KNOWN_MODES:
            LOGGER.warning("Mode %r is not one the reader advertises; sending anyway", mode)

        with self._command():
            sequence = self._next_sequence()
            try:
                result = await self._device.set_mode(mode)
            except DeviceError as exc:
                result = ModeChangeResult(mode=mode, ok=False, detail=str(exc))

            if result.ok:
                LOGGER.info("Reader mode set to %r", mode)
                self._apply(sequence, notice=None)
            else:
                self._apply(sequence, notice=f"Mode change to {mode!r} failed: {result.detail}")

            if result.ok or self._mode_refresh == "always":
                await self.refresh_status()
            return result

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    @contextlib.contextmanager
    def _command(self) -> Iterator[None]:
        self._in_flight += 1
        try:
            yield
        finally:
            self._in_flight -= 1

    async def _fetch_status(self) -> Optional[DeviceStatus]:
        try:
            status = await self._device.fetch_status()
        except DeviceError as exc:
            LOGGER.warning("Status refresh failed: %s", exc)
            self._last_refresh_ok = False
            self._last_refresh_error = str(exc)
            return None

        self._last_refresh_ok = True
        self._last_refresh_error = None
        return status

    def _refresh_notice(self) -> str:
        return f"Status refresh failed: {self._last_refresh_error}"

    def _next_sequence(self) -> int:
        self._issued += 1
        return self._issued

    def _apply(self, sequence: int, **changes: Any) -> bool:
        if sequence <= self._applied:
            LOGGER.debug(
                "Discarding stale update #%d (last applied #%d)", sequence, self._applied
            )
            return False

        self._applied = sequence
        self._render(**changes)
        return True

    def _render(self, **changes: Any) -> None:
        self._state = replace(self._state, **changes)
        for view in list(self._views):
            view.render(self._state)


def _status_changes(status: DeviceStatus) -> Dict[str, Any]:
    return {
        "mode": status.mode,
        "uid": render_uid(status.uid),
        "dump": render_dump(status.dump),
        "issuer": issuer_name(status.uid),
        "refresh_error": None,
    }
