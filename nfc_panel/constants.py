"""Constants used across the nfc-panel package."""

from __future__ import annotations

from pathlib import Path

APP_NAME = "nfc-panel"
DEFAULT_CONFIG_FILENAME = f"{APP_NAME}.cfg"
DEFAULT_CONFIG_PATH = Path.home() / ".config" / APP_NAME / DEFAULT_CONFIG_FILENAME

# The reader serves its own access point; this is its address on that network.
DEFAULT_DEVICE_URL = "http://192.168.4.1"

STATUS_PATH = "/api/status"
READ_PATH = "/api/read"
MODE_PATH = "/api/mode"

# Element ids shared with the host page.
CURRENT_MODE = "currentMode"
LAST_UID = "lastUid"
DUMP_AREA = "dumpArea"
REFRESH_BTN = "refreshBtn"
READ_BTN = "readBtn"
SET_MODE_BTN = "setModeBtn"
MODE_SELECT = "modeSelect"

UID_PLACEHOLDER = "—"
READING_PLACEHOLDER = "Reading…"

KNOWN_MODES = ("read", "write", "emulate")
