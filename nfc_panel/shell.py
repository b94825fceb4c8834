"""Interactive control surface for the panel.

The controls mirror the host page: three buttons (``refreshBtn``,
``readBtn``, ``setModeBtn``) and a mode selector (``modeSelect``) whose value
is read when ``setModeBtn`` is activated.
"""

from __future__ import annotations

import asyncio
import logging
import shlex
from typing import Any, Awaitable, Callable, Optional

from .constants import KNOWN_MODES, MODE_SELECT, READ_BTN, REFRESH_BTN, SET_MODE_BTN
from .panel import StatusPanel
from .views import ConsoleView

LOGGER = logging.getLogger(__name__)

LineReader = Callable[[str], Awaitable[Optional[str]]]

HELP_TEXT = """\
Commands:
  refresh          refresh the device status
  read             read the card in the field
  select <mode>    choose a mode ({modes})
  set              apply the selected mode
  mode <mode>      select and apply a mode
  show             print the current view
  help             this text
  quit             leave the shell"""


class UnknownControlError(KeyError):
    """Raised when activating a control id the panel does not have."""


class ControlSurface:
    """Maps control ids to panel commands."""

    def __init__(self, panel: StatusPanel, *, selected_mode: str = KNOWN_MODES[0]) -> None:
        self._panel = panel
        self.values = {MODE_SELECT: selected_mode}
        self._actions: dict[str, Callable[[], Awaitable[Any]]] = {
            REFRESH_BTN: panel.refresh_status,
            READ_BTN: panel.trigger_read,
            SET_MODE_BTN: self._apply_selected_mode,
        }

    @property
    def selected_mode(self) -> str:
        return self.values[MODE_SELECT]

    def select_mode(self, mode: str) -> None:
        self.values[MODE_SELECT] = mode

    def activate(self, control_id: str) -> Awaitable[Any]:
        try:
            action = self._actions[control_id]
        except KeyError:
            raise UnknownControlError(control_id) from None
        return action()

    async def _apply_selected_mode(self) -> Any:
        return await self._panel.set_mode(self.selected_mode)


async def _stdin_reader(prompt: str) -> Optional[str]:
    try:
        return await asyncio.to_thread(input, prompt)
    except EOFError:
        return None


class PanelShell:
    """Line-oriented loop; every command runs as its own task so they may overlap."""

    def __init__(
        self,
        panel: StatusPanel,
        view: ConsoleView,
        *,
        selected_mode: str = KNOWN_MODES[0],
        read_line: Optional[LineReader] = None,
        prompt: str = "nfc> ",
    ) -> None:
        self._panel = panel
        self._view = view
        self._controls = ControlSurface(panel, selected_mode=selected_mode)
        self._read_line = read_line or _stdin_reader
        self._prompt = prompt
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def controls(self) -> ControlSurface:
        return self._controls

    async def run(self) -> None:
        try:
            while True:
                line = await self._read_line(self._prompt)
                if line is None:
                    break
                if not self.handle(line):
                    break
        finally:
            await self.drain()

    def handle(self, line: str) -> bool:
        """Handle one command line; returns False when the shell should exit."""

        try:
            parts = shlex.split(line)
        except ValueError as exc:
            self._view.stream.write(f"Could not parse command: {exc}\n")
            return True

        if not parts:
            return True

        command, args = parts[0].lower(), parts[1:]

        if command in {"quit", "exit"}:
            return False
        if command == "help":
            self._view.stream.write(HELP_TEXT.format(modes=", ".join(KNOWN_MODES)) + "\n")
        elif command == "show":
            self._view.show(self._panel.state)
        elif command == "refresh":
            self._spawn(REFRESH_BTN)
        elif command == "read":
            self._spawn(READ_BTN)
        elif command == "select" and len(args) == 1:
            self._controls.select_mode(args[0])
        elif command == "set" and not args:
            self._spawn(SET_MODE_BTN)
        elif command == "mode" and len(args) == 1:
            self._controls.select_mode(args[0])
            self._spawn(SET_MODE_BTN)
        else:
            self._view.stream.write(f"Unknown command: {line.strip()} (try 'help')\n")
        return True

    async def drain(self) -> None:
        """Wait for in-flight commands to finish."""

        if not self._tasks:
            return
        await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _spawn(self, control_id: str) -> None:
        task = asyncio.ensure_future(self._controls.activate(control_id))
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            LOGGER.error("Panel command failed", exc_info=exc)

