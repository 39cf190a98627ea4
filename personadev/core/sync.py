"""
FILE: personadev/core/sync.py
PURPOSE: Full-state synchronization with the remote relay
EXPORTS:
  - SyncStatus (enum)
  - SyncResult (dataclass)
  - RelayApi (aiohttp transport for the relay's HTTP surface)
  - SyncClient (push/pull with status state machine and in-flight guard)
  - detect_device(user_agent) -> str
DEPENDENCIES:
  - aiohttp (HTTP client)
  - asyncio (stdlib)
  - personadev.core.models (AppState)
  - personadev.core.service (replace_state, default pull target)
NOTES:
  - Whole-document, last-write-wins; no merge and no delta
  - At most one push/pull in flight; a second call while syncing is a no-op
  - success/error revert to idle after a display window; that timer is
    cosmetic and never retries anything
  - push/pull never raise PersonaDevError; failures land in status + message
"""

import asyncio
import logging
import os
import platform
import re
import sqlite3
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import aiohttp

from . import service
from .constants import (
    DEVICE_ANDROID,
    DEVICE_IOS,
    DEVICE_MOBILE,
    DEVICE_WEB,
    SUCCESS_DISPLAY_SECONDS,
    ERROR_DISPLAY_SECONDS,
)
from .exceptions import (
    PersonaDevError,
    NetworkFailureError,
    MalformedSnapshotError,
)
from .models import AppState

logger = logging.getLogger(__name__)


# --- Device classification ---

_ANDROID_PATTERN = re.compile(r"android", re.IGNORECASE)
_IOS_PATTERN = re.compile(r"iPad|iPhone|iPod")
_MOBILE_PATTERN = re.compile(r"mobile", re.IGNORECASE)


def user_agent_signal() -> str:
    """Build a user-agent-like string describing this device."""
    override = os.environ.get("PERSONADEV_USER_AGENT")
    if override:
        return override
    signal = platform.platform()
    if "ANDROID_ROOT" in os.environ:
        signal = f"Android {signal}"
    return signal


def detect_device(user_agent: Optional[str] = None) -> str:
    """
    Classify a user agent into android, ios, mobile or web.

    Used as an audit label only; it never changes sync behaviour.
    """
    ua = user_agent if user_agent is not None else user_agent_signal()
    if _ANDROID_PATTERN.search(ua):
        return DEVICE_ANDROID
    if _IOS_PATTERN.search(ua):
        return DEVICE_IOS
    if _MOBILE_PATTERN.search(ua):
        return DEVICE_MOBILE
    return DEVICE_WEB


# --- Transport ---


class RelayApi:
    """
    Thin async client for the relay's JSON endpoints.

    Every method performs exactly one HTTP round trip and returns the
    decoded JSON object.

    Raises (all methods):
        NetworkFailureError: Connection failure, timeout or non-2xx status
        MalformedSnapshotError: Body is not a JSON object
    """

    def __init__(self, base_url: str, timeout: float = 15.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def _request(self, method: str, endpoint: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.base_url}{endpoint}"
        client_timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with aiohttp.ClientSession(timeout=client_timeout) as session:
                async with session.request(
                    method,
                    url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                ) as response:
                    try:
                        body = await response.json(content_type=None)
                    except ValueError:
                        body = None

                    if response.status >= 400:
                        message = body.get("error") if isinstance(body, dict) else None
                        raise NetworkFailureError(
                            message or f"{response.status} {response.reason}",
                            status=response.status,
                        )
        except aiohttp.ClientError as e:
            raise NetworkFailureError(f"Cannot reach relay at {url}: {e}")
        except asyncio.TimeoutError:
            raise NetworkFailureError(f"Relay at {url} timed out after {self.timeout}s")

        if not isinstance(body, dict):
            raise MalformedSnapshotError(f"Relay response from {endpoint} is not a JSON object")
        return body

    async def health(self) -> Dict[str, Any]:
        return await self._request("GET", "/health")

    async def post_sync(self, data: Dict[str, Any], device: str) -> Dict[str, Any]:
        return await self._request("POST", "/sync", {"data": data, "device": device})

    async def get_sync(self) -> Dict[str, Any]:
        return await self._request("GET", "/sync")

    async def get_history(self) -> Dict[str, Any]:
        return await self._request("GET", "/sync/history")

    async def get_export(self, fmt: str) -> Dict[str, Any]:
        return await self._request("GET", f"/export/{fmt}")

    async def post_import(self, data: Dict[str, Any], device: str) -> Dict[str, Any]:
        return await self._request("POST", "/import", {"data": data, "device": device})


# --- Client ---


class SyncStatus(str, Enum):
    IDLE = "idle"
    SYNCING = "syncing"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class SyncResult:
    """Outcome of one push or pull."""

    ok: bool
    timestamp: Optional[str] = None
    state: Optional[AppState] = None
    error: Optional[str] = None


def _parse_timestamp(value: Optional[str]) -> datetime:
    if value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            logger.debug("Unparseable relay timestamp %r", value)
    return datetime.now()


def _check_success(body: Dict[str, Any], fallback: str) -> None:
    if body.get("success") is not True:
        raise NetworkFailureError(body.get("error") or fallback)


class SyncClient:
    """
    Exchanges the whole AppState with the relay.

    Status moves idle -> syncing -> success|error, and success/error fall
    back to idle after their display window.
    """

    def __init__(
        self,
        api: RelayApi,
        replace: Callable[[AppState], Any] = service.replace_state,
        success_display: float = SUCCESS_DISPLAY_SECONDS,
        error_display: float = ERROR_DISPLAY_SECONDS,
    ):
        self.api = api
        self._replace = replace
        self.success_display = success_display
        self.error_display = error_display
        self._status = SyncStatus.IDLE
        self._revert_handle: Optional[asyncio.TimerHandle] = None
        self.message: Optional[str] = None
        self.last_sync_time: Optional[datetime] = None

    @property
    def status(self) -> SyncStatus:
        return self._status

    @property
    def in_flight(self) -> bool:
        return self._status is SyncStatus.SYNCING

    def _begin(self) -> None:
        if self._revert_handle is not None:
            self._revert_handle.cancel()
            self._revert_handle = None
        self._status = SyncStatus.SYNCING
        self.message = None

    def _settle(self, status: SyncStatus, message: Optional[str] = None) -> None:
        self._status = status
        self.message = message
        if status is SyncStatus.IDLE:
            return
        delay = self.success_display if status is SyncStatus.SUCCESS else self.error_display
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._revert_handle = loop.call_later(delay, self._revert, status)

    def _revert(self, status: SyncStatus) -> None:
        if self._status is status:
            self._status = SyncStatus.IDLE
            self.message = None
        self._revert_handle = None

    async def push(self, state: AppState, device: Optional[str] = None) -> Optional[SyncResult]:
        """
        Send the whole state to the relay.

        The state is serialized when push is called, so it reflects every
        mutation applied to it up to that point.

        Returns:
            SyncResult, or None if another sync was already in flight
        """
        if self.in_flight:
            logger.debug("Push ignored: sync already in flight")
            return None

        self._begin()
        payload = state.to_dict()
        device = device or detect_device()

        try:
            body = await self.api.post_sync(payload, device)
            _check_success(body, "Sync failed")
            timestamp = body.get("timestamp")
            if not isinstance(timestamp, str):
                raise MalformedSnapshotError("Relay acknowledged without a timestamp")
        except PersonaDevError as e:
            logger.error("Sync error: %s", e)
            self._settle(SyncStatus.ERROR, str(e))
            return SyncResult(ok=False, error=str(e))

        self.last_sync_time = datetime.now()
        logger.info("Pushed state from %s at %s", device, timestamp)
        self._settle(SyncStatus.SUCCESS, "Synced successfully")
        return SyncResult(ok=True, timestamp=timestamp)

    async def pull(self) -> Optional[SyncResult]:
        """
        Fetch the latest snapshot and replace local state with it.

        A relay with nothing stored leaves local state untouched and
        returns to idle; a failure, including a failed local write, leaves
        it untouched and sets error.

        Returns:
            SyncResult (state is None when the relay had nothing), or None
            if another sync was already in flight
        """
        if self.in_flight:
            logger.debug("Pull ignored: sync already in flight")
            return None

        self._begin()
        try:
            body = await self.api.get_sync()
            _check_success(body, "Fetch failed")
            data = body.get("data")
            if data is None:
                logger.info("Relay has no stored snapshot yet")
                self._settle(SyncStatus.IDLE, body.get("message"))
                return SyncResult(ok=True)
            state = AppState.from_dict(data)
            self._replace(state)
        except (PersonaDevError, sqlite3.Error, OSError) as e:
            logger.error("Fetch error: %s", e)
            self._settle(SyncStatus.ERROR, str(e))
            return SyncResult(ok=False, error=str(e))

        timestamp = body.get("timestamp")
        self.last_sync_time = _parse_timestamp(timestamp)
        logger.info("Pulled snapshot from %s", timestamp)
        self._settle(SyncStatus.SUCCESS, "Fetched successfully")
        return SyncResult(ok=True, timestamp=timestamp, state=state)

    async def history(self) -> List[Dict[str, Any]]:
        """Audit log entries, most recent first."""
        body = await self.api.get_history()
        _check_success(body, "History unavailable")
        history = body.get("history")
        if not isinstance(history, list):
            raise MalformedSnapshotError("Relay history is not a list")
        return history

    async def remote_export(self, fmt: str) -> Dict[str, Any]:
        """Latest stored snapshot, raw (json) or enveloped (pdev)."""
        body = await self.api.get_export(fmt)
        if body.get("success") is False:
            raise NetworkFailureError(body.get("error") or "Export failed")
        return body

    async def remote_import(self, payload: Dict[str, Any], device: Optional[str] = None) -> Dict[str, Any]:
        """Append a snapshot (raw or enveloped) to the relay without touching local state."""
        body = await self.api.post_import(payload, device or detect_device())
        _check_success(body, "Import failed")
        return body

    async def health(self) -> Dict[str, Any]:
        return await self.api.health()
