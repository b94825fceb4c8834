"""Reader adapter speaking the device's small JSON/form HTTP API."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional
from urllib.parse import quote

import aiohttp

from ..config import DeviceConfig
from ..constants import MODE_PATH, READ_PATH, STATUS_PATH
from ..core import (
    DeviceAdapter,
    DeviceProtocolError,
    DeviceRequestError,
    DeviceStatus,
    ModeChangeResult,
    ReadResult,
)

LOGGER = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

# Characters encodeURIComponent leaves alone on top of quote()'s defaults.
_URI_COMPONENT_SAFE = "!*'()"


def encode_mode_form(mode: str) -> str:
    """Build the ``mode=<value>`` form body the reader expects."""

    return "mode=" + quote(mode, safe=_URI_COMPONENT_SAFE)


class DeviceClient(DeviceAdapter):
    """Non-blocking client for the reader's HTTP API."""

    def __init__(
        self,
        config: DeviceConfig,
        *,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self.config = config
        self._base_url = self.config.url.rstrip("/")
        self._session: Optional[aiohttp.ClientSession] = session
        self._owns_session = session is None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def fetch_status(self) -> DeviceStatus:
        """Fetch the current status snapshot via ``GET /api/status``."""

        payload = await self._request_json("GET", STATUS_PATH)
        return DeviceStatus.from_payload(payload)

    async def trigger_read(self) -> ReadResult:
        """Run a card read via ``POST /api/read``."""

        payload = await self._request_json("POST", READ_PATH)
        return ReadResult.from_payload(payload)

    async def set_mode(self, mode: str) -> ModeChangeResult:
        """Send ``mode=<value>`` to ``POST /api/mode``.

        The response body is ignored; only the status code decides the outcome.
        Transport failures are folded into the returned result.
        """

        session = await self._ensure_session()
        url = f"{self._base_url}{MODE_PATH}"

        try:
            body = encode_mode_form(mode)
            async with asyncio.timeout(self.config.request_timeout):
                async with session.post(
                    url, data=body, headers={"Content-Type": FORM_CONTENT_TYPE}
                ) as response:
                    if response.status >= 400:
                        detail = (await response.text(errors="replace")).strip()
                        LOGGER.warning(
                            "Mode change to %r rejected with status %d: %s",
                            mode,
                            response.status,
                            detail,
                        )
                        return ModeChangeResult(
                            mode=mode,
                            ok=False,
                            status=response.status,
                            detail=f"HTTP {response.status}: {detail}" if detail else f"HTTP {response.status}",
                        )
                    return ModeChangeResult(mode=mode, ok=True, status=response.status)
        except UnicodeEncodeError:
            LOGGER.warning("Mode %r cannot be form-encoded; not sent", mode)
            return ModeChangeResult(mode=mode, ok=False, detail="mode cannot be encoded")
        except asyncio.TimeoutError:
            LOGGER.warning("Mode change to %r timed out (url=%s)", mode, url)
            return ModeChangeResult(mode=mode, ok=False, detail="timeout")
        except aiohttp.ClientError as exc:
            LOGGER.warning("Mode change to %r failed: %s", mode, exc)
            return ModeChangeResult(mode=mode, ok=False, detail=_describe(exc))

    async def aclose(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=None)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True
        return self._session

    async def _request_json(self, method: str, path: str) -> Any:
        session = await self._ensure_session()
        url = f"{self._base_url}{path}"

        try:
            async with asyncio.timeout(self.config.request_timeout):
                async with session.request(method, url) as response:
                    if response.status >= 400:
                        detail = (await response.text(errors="replace")).strip()
                        message = f"HTTP {response.status}"
                        if detail:
                            message = f"{message}: {detail}"
                        raise DeviceRequestError(message, status=response.status)
                    body = await response.read()
        except asyncio.TimeoutError:
            LOGGER.warning(
                "%s %s timed out after %.1fs",
                method,
                url,
                self.config.request_timeout or 0.0,
            )
            raise DeviceRequestError("timeout") from None
        except aiohttp.ClientError as exc:
            raise DeviceRequestError(_describe(exc)) from exc

        try:
            return json.loads(body)
        except json.JSONDecodeError as exc:
            raise DeviceProtocolError(f"invalid JSON from {path}: {exc.msg}") from exc
        except UnicodeDecodeError as exc:
            raise DeviceProtocolError(f"invalid JSON from {path}: {exc.reason}") from exc


def _describe(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


__all__ = ["DeviceClient", "FORM_CONTENT_TYPE", "encode_mode_form"]
