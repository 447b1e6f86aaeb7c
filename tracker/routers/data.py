"""Import and export of the whole dataset."""
from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, HTTPException

from tracker.errors import ImportRejectedError
from tracker.models.export import ViewExport
from tracker.models.snapshot import Snapshot
from tracker.services.tracker_service import tracker_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/data", tags=["data"])


@router.get("/export", response_model=Snapshot)
async def export_data() -> Snapshot:
    """Everything, in the same shape /import accepts."""
    return tracker_service.export_snapshot()


@router.get("/export/view", response_model=ViewExport)
async def export_view() -> ViewExport:
    """The applications currently displayed, in display order."""
    return tracker_service.export_view()


@router.post("/import", response_model=Snapshot)
async def import_data(payload: Any = Body(...), confirm: bool = False) -> Snapshot:
    """Replace all data. Requires ``confirm=true`` because it overwrites everything."""
    if not confirm:
        raise HTTPException(
            status_code=409,
            detail="Importing overwrites all current data. Repeat with confirm=true.",
        )
    try:
        return tracker_service.import_snapshot(payload)
    except ImportRejectedError as e:
        logger.warning("Import rejected: %s", e)
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/reset", response_model=Snapshot)
async def reset_data(confirm: bool = False) -> Snapshot:
    if not confirm:
        raise HTTPException(
            status_code=409,
            detail="Resetting overwrites all current data. Repeat with confirm=true.",
        )
    return tracker_service.reset_to_seed()
