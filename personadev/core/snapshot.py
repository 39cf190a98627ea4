"""
FILE: personadev/core/snapshot.py
PURPOSE: Snapshot encoding - metadata envelope, export files, import parsing
EXPORTS:
  - utc_timestamp() -> str
  - is_envelope(payload) -> bool
  - wrap_envelope(data) -> dict
  - unwrap_snapshot(payload) -> dict
  - encode_export(state, fmt) -> dict
  - export_filename(fmt, day) -> str
  - write_export(state, fmt, directory) -> Path
  - read_import(path) -> AppState
DEPENDENCIES:
  - json (stdlib)
  - personadev.core.models (AppState)
NOTES:
  - Envelope is distinguished from raw state by the _format tag
  - Shared by the local CLI export/import and the relay
"""

import json
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from .constants import (
    ENVELOPE_FORMAT,
    ENVELOPE_VERSION,
    ENVELOPE_CREATOR,
    EXPORT_FORMATS,
    EXPORT_FORMAT_PDEV,
)
from .exceptions import InvalidInputError, MalformedSnapshotError
from .models import AppState


def utc_timestamp() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def is_envelope(payload: Any) -> bool:
    return isinstance(payload, dict) and payload.get("_format") == ENVELOPE_FORMAT


def wrap_envelope(data: Dict[str, Any]) -> Dict[str, Any]:
    """Wrap raw state data in the metadata envelope."""
    return {
        "_format": ENVELOPE_FORMAT,
        "_version": ENVELOPE_VERSION,
        "_exportedAt": utc_timestamp(),
        "_creator": ENVELOPE_CREATOR,
        "data": data,
    }


def unwrap_snapshot(payload: Any) -> Dict[str, Any]:
    """
    Return the raw state data from either an envelope or raw state.

    Raises:
        MalformedSnapshotError: If payload (or the enveloped data) is not an object
    """
    if is_envelope(payload):
        payload = payload.get("data")
    if not isinstance(payload, dict):
        raise MalformedSnapshotError("Snapshot data must be a JSON object")
    return payload


def check_format(fmt: str) -> str:
    """Validate an export format name."""
    if fmt not in EXPORT_FORMATS:
        raise InvalidInputError(
            f"Invalid format '{fmt}'. Use {' or '.join(EXPORT_FORMATS)}"
        )
    return fmt


def encode_export(data: Dict[str, Any], fmt: str) -> Dict[str, Any]:
    """Encode raw state data for export in the requested format."""
    check_format(fmt)
    if fmt == EXPORT_FORMAT_PDEV:
        return wrap_envelope(data)
    return data


def export_filename(fmt: str, day: Optional[date] = None) -> str:
    day = day or date.today()
    return f"personadev-{day.isoformat()}.{fmt}"


def write_export(state: AppState, fmt: str, directory: Path) -> Path:
    """
    Write state to an export file in directory.

    Returns:
        Path of the written file
    """
    payload = encode_export(state.to_dict(), fmt)
    path = Path(directory) / export_filename(fmt)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return path


def read_import(path: Path) -> AppState:
    """
    Parse an exported file (raw or enveloped) into an AppState.

    Raises:
        InvalidInputError: If the file can't be read
        MalformedSnapshotError: If the file isn't a valid snapshot
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise InvalidInputError(f"Cannot read {path}: {e}")

    try:
        payload = json.loads(text)
    except ValueError as e:
        raise MalformedSnapshotError(f"{path} is not valid JSON: {e}")

    return AppState.from_dict(unwrap_snapshot(payload))
