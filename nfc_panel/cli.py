"""Command-line interface for nfc-panel."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import constants
from .app import PanelApp
from .config import ConfigurationError, load_config

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nfc-panel", description="Status panel and remote control for an NFC reader"
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=constants.DEFAULT_CONFIG_PATH,
        help=f"Path to configuration file (default: {constants.DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--url", help="Reader base URL, overriding [device] url from the configuration"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("status", help="Refresh and print the reader status")
    subparsers.add_parser("read", help="Read the card currently on the reader")

    mode_parser = subparsers.add_parser("mode", help="Switch the reader mode")
    mode_parser.add_argument(
        "mode", help=f"Mode to select (reader modes: {', '.join(constants.KNOWN_MODES)})"
    )

    watch_parser = subparsers.add_parser(
        "watch", help="Print status changes until interrupted"
    )
    watch_parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds between refreshes (default: [polling] interval_seconds or 5)",
    )

    subparsers.add_parser("shell", help="Interactive panel with refresh/read/mode controls")

    subparsers.add_parser(
        "show-config", help="Print the resolved configuration and exit"
    )

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigurationError as exc:
        LOGGER.error("Invalid configuration in %s: %s", args.config, exc)
        return 2

    if args.url:
        config.device.url = args.url
        config.raw.set("device", "url", args.url)

    if args.command == "status":
        return PanelApp.start(config, lambda app: app.run_status())

    if args.command == "read":
        return PanelApp.start(config, lambda app: app.run_read())

    if args.command == "mode":
        return PanelApp.start(config, lambda app: app.run_mode(args.mode))

    if args.command == "watch":
        return PanelApp.start(
            config, lambda app: app.run_watch(interval_seconds=args.interval)
        )

    if args.command == "shell":
        return PanelApp.start(config, lambda app: app.run_shell())

    if args.command == "show-config":
        print(f"Configuration loaded from {config.path!s}\n")
        for section in config.raw.sections():
            print(f"[{section}]")
            for key, value in config.raw[section].items():
                print(f"{key} = {value}")
            print()
        return 0

    LOGGER.error("Unknown command: %s", args.command)
    return 1


if __name__ == "__main__":
    sys.exit(main())
