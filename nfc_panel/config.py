"""Configuration loader for nfc-panel."""

from __future__ import annotations

from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from . import constants

REFRESH_ERROR_POLICIES = ("silent", "notice")
MODE_REFRESH_POLICIES = ("always", "on_success")


class ConfigurationError(ValueError):
    """Raised when a configuration value cannot be used."""


@dataclass(slots=True)
class DeviceConfig:
    url: str = constants.DEFAULT_DEVICE_URL
    request_timeout_seconds: float = 0.0  # 0 disables the timeout

    @property
    def request_timeout(self) -> Optional[float]:
        if self.request_timeout_seconds <= 0:
            return None
        return self.request_timeout_seconds


@dataclass(slots=True)
class PanelSettings:
    refresh_errors: str = "silent"
    mode_refresh: str = "always"
    default_mode: str = constants.KNOWN_MODES[0]


@dataclass(slots=True)
class PollingConfig:
    interval_seconds: float = 0.0

    @property
    def enabled(self) -> bool:
        return self.interval_seconds > 0


@dataclass(slots=True)
class LoggingConfig:
    level: str = "INFO"
    path: Optional[Path] = None
    log_network: bool = False


@dataclass(slots=True)
class HealthConfig:
    enabled: bool = False
    host: str = "127.0.0.1"
    port: int = 0


@dataclass(slots=True)
class PanelConfig:
    device: DeviceConfig
    panel: PanelSettings
    polling: PollingConfig
    logging: LoggingConfig
    health: HealthConfig
    raw: ConfigParser
    path: Path


def _parse_choice(parser: ConfigParser, section: str, key: str, choices: tuple[str, ...]) -> str:
    value = parser.get(section, key).strip().lower()
    if value not in choices:
        raise ConfigurationError(
            f"[{section}] {key} must be one of {', '.join(choices)} (got {value!r})"
        )
    return value


def load_config(path: Optional[Path] = None) -> PanelConfig:
    """Load configuration from disk, applying defaults where necessary."""

    config_path = path or constants.DEFAULT_CONFIG_PATH
    parser = ConfigParser()
    parser.read_dict(
        {
            "device": {
                "url": constants.DEFAULT_DEVICE_URL,
                "request_timeout_seconds": "0",
            },
            "panel": {
                "refresh_errors": "silent",
                "mode_refresh": "always",
                "default_mode": constants.KNOWN_MODES[0],
            },
            "polling": {
                "interval_seconds": "0",
            },
            "logging": {
                "level": "INFO",
                "path": "",
                "log_network": "false",
            },
            "health": {
                "enabled": "false",
                "host": "127.0.0.1",
                "port": "0",
            },
        }
    )

    if config_path.exists():
        parser.read(config_path)

    try:
        timeout_value = parser.getfloat("device", "request_timeout_seconds", fallback=0.0)
    except ValueError:
        timeout_value = 0.0

    device = DeviceConfig(
        url=parser.get("device", "url").strip(),
        request_timeout_seconds=max(0.0, timeout_value),
    )

    panel = PanelSettings(
        refresh_errors=_parse_choice(parser, "panel", "refresh_errors", REFRESH_ERROR_POLICIES),
        mode_refresh=_parse_choice(parser, "panel", "mode_refresh", MODE_REFRESH_POLICIES),
        default_mode=parser.get("panel", "default_mode").strip(),
    )

    try:
        interval_value = parser.getfloat("polling", "interval_seconds", fallback=0.0)
    except ValueError:
        interval_value = 0.0

    polling = PollingConfig(interval_seconds=max(0.0, interval_value))

    log_path_value = parser.get("logging", "path", fallback="").strip()
    logging_config = LoggingConfig(
        level=parser.get("logging", "level", fallback="INFO"),
        path=Path(log_path_value).expanduser() if log_path_value else None,
        log_network=parser.getboolean("logging", "log_network", fallback=False),
    )

    health = HealthConfig(
        enabled=parser.getboolean("health", "enabled", fallback=False),
        host=parser.get("health", "host", fallback="127.0.0.1"),
        port=parser.getint("health", "port", fallback=0),
    )

    return PanelConfig(
        device=device,
        panel=panel,
        polling=polling,
        logging=logging_config,
        health=health,
        raw=parser,
        path=config_path,
    )

