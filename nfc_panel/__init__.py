"""Status panel and remote control client for a networked NFC reader."""

__version__ = "0.1.0"
