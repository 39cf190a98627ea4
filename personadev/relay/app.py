"""
FILE: personadev/relay/app.py
PURPOSE: Stateless HTTP relay between sync clients and the spreadsheet store
EXPORTS:
  - create_app(config, store) -> FastAPI
  - SyncRequest (request body model)
DEPENDENCIES:
  - fastapi (HTTP framework)
  - pydantic (request validation)
  - personadev.relay.store (SheetStore)
  - personadev.core.snapshot (envelope handling, timestamps)
NOTES:
  - All routes live under /api and speak JSON
  - Without a spreadsheet id or credentials every data endpoint answers
    400 before any remote call
  - Endpoints are plain (sync) functions so blocking Sheets calls run in
    FastAPI's threadpool
  - Snapshot row is appended before its audit row
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import RelayConfig
from ..core.constants import (
    DEVICE_WEB,
    DATA_TYPE_FULL_SYNC,
    DATA_TYPE_IMPORT,
    ACTION_SYNC,
    ACTION_IMPORT,
    STATUS_SUCCESS,
)
from ..core.exceptions import (
    PersonaDevError,
    ConfigurationMissingError,
    InvalidInputError,
    MalformedSnapshotError,
)
from ..core.models import AppState
from ..core.snapshot import check_format, encode_export, unwrap_snapshot, utc_timestamp
from .store import SheetStore

logger = logging.getLogger(__name__)

__version__ = "1.0.0"

# Errors that are the caller's fault; everything else is a 500
_CLIENT_ERRORS = (ConfigurationMissingError, InvalidInputError)


class SyncRequest(BaseModel):
    """Body of POST /sync and POST /import."""

    data: Any = None
    device: str = DEVICE_WEB


def get_store(request: Request):
    """
    Resolve the snapshot store, connecting on first use.

    Raises:
        ConfigurationMissingError: Relay has no spreadsheet configured
    """
    state = request.app.state
    if state.store is None:
        config: RelayConfig = state.config
        missing = config.missing()
        if missing:
            raise ConfigurationMissingError("; ".join(missing))
        state.store = SheetStore.connect(config)
    return state.store


def _validated(payload: Any) -> dict:
    """Unwrap an envelope and make sure the result decodes as AppState."""
    try:
        data = unwrap_snapshot(payload)
        AppState.from_dict(data)
    except MalformedSnapshotError as e:
        raise InvalidInputError(f"Invalid snapshot: {e}")
    return data


router = APIRouter(prefix="/api")


@router.get("/health")
def health(request: Request):
    state = request.app.state
    return {
        "status": "ok",
        "sheets": state.store is not None,
        "spreadsheetId": "configured" if state.config.spreadsheet_id else "missing",
    }


@router.post("/sync")
def push_snapshot(body: SyncRequest, store=Depends(get_store)):
    """Append a full snapshot and its audit row."""
    if not isinstance(body.data, dict):
        raise InvalidInputError("Request body must include a data object")
    data = _validated(body.data)

    timestamp = utc_timestamp()
    store.append_snapshot(timestamp, DATA_TYPE_FULL_SYNC, data)
    store.append_log(timestamp, ACTION_SYNC, body.device, STATUS_SUCCESS)

    logger.info("Data synced at %s from %s", timestamp, body.device)
    return {"success": True, "timestamp": timestamp}


@router.get("/sync")
def latest_snapshot(store=Depends(get_store)):
    """Return the most recently appended snapshot, or data: null."""
    row = store.latest_snapshot()
    if row is None:
        return {"success": True, "data": None, "message": "No data found"}

    logger.info("Retrieved data from %s", row.timestamp)
    return {"success": True, "data": row.data, "timestamp": row.timestamp}


@router.get("/sync/history")
def sync_history(store=Depends(get_store)):
    return {"success": True, "history": [entry.to_dict() for entry in store.history()]}


@router.get("/export/{fmt}")
def export_snapshot(fmt: str, store=Depends(get_store)):
    """Latest snapshot as raw JSON (json) or wrapped in the envelope (pdev)."""
    check_format(fmt)
    row = store.latest_snapshot()
    if row is None:
        return JSONResponse(status_code=404, content={"success": False, "error": "No data to export"})

    return JSONResponse(
        content=encode_export(row.data, fmt),
        headers={"Content-Disposition": f"attachment; filename=personadev-backup.{fmt}"},
    )


@router.post("/import")
def import_snapshot(body: SyncRequest, store=Depends(get_store)):
    """Append an imported snapshot (raw or enveloped) like a push."""
    data = _validated(body.data)

    timestamp = utc_timestamp()
    store.append_snapshot(timestamp, DATA_TYPE_IMPORT, data)
    store.append_log(timestamp, ACTION_IMPORT, body.device, STATUS_SUCCESS)

    logger.info("Data imported at %s from %s", timestamp, body.device)
    return {"success": True, "data": data, "timestamp": timestamp}


def create_app(config: RelayConfig = None, store=None) -> FastAPI:
    """
    Build the relay application.

    Args:
        config: Relay settings (defaults to RelayConfig.from_env())
        store: Snapshot store to use instead of connecting to Google Sheets
    """
    config = config or RelayConfig.from_env()

    app = FastAPI(title="PersonaDev Relay", version=__version__)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.config = config
    app.state.store = store

    @app.exception_handler(PersonaDevError)
    async def handle_error(request: Request, exc: PersonaDevError):
        status = 400 if isinstance(exc, _CLIENT_ERRORS) else 500
        if status == 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status, content={"success": False, "error": str(exc)})

    app.include_router(router)

    if store is None:
        for problem in config.missing():
            logger.warning(problem)

    return app
