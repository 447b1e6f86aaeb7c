"""Application, checklist and per-application essay endpoints."""
from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from tracker.models.application import (
    Application,
    ApplicationCreate,
    ApplicationUpdate,
    ChecklistItem,
    ChecklistTaskCreate,
    NotesEdit,
)
from tracker.models.essay import Essay, EssayReorder
from tracker.models.view import SortMode
from tracker.services.tracker_service import tracker_service

router = APIRouter(prefix="/api/applications", tags=["applications"])


def _get_or_404(app_id: str) -> Application:
    app = tracker_service.store.get_application(app_id)
    if app is None:
        raise HTTPException(status_code=404, detail=f"Application {app_id!r} not found")
    return app


@router.get("/", response_model=list[Application])
async def list_applications(
    sort: SortMode | None = None,
    tags: list[str] | None = Query(None, description="Selected tag ids"),
    q: str | None = Query(None, description="Search terms separated by ';'"),
) -> list[Application]:
    """Filtered applications in display order. Given parameters update the view controls."""
    tracker_service.set_view_state(sort_mode=sort, selected_tag_ids=tags, search_query=q)
    return tracker_service.list_applications()


@router.post("/", response_model=Application, status_code=201)
async def add_application(data: ApplicationCreate) -> Application:
    return tracker_service.add_application(data)


@router.get("/{app_id}", response_model=Application)
async def get_application(app_id: str) -> Application:
    return _get_or_404(app_id)


@router.get("/{app_id}/completion")
async def get_completion(app_id: str) -> dict:
    _get_or_404(app_id)
    return {"applicationId": app_id, "completion": tracker_service.completion(app_id)}


@router.patch("/{app_id}", response_model=Application)
async def update_application(app_id: str, changes: ApplicationUpdate) -> Application:
    app = tracker_service.update_application(app_id, changes)
    if app is None:
        raise HTTPException(status_code=404, detail=f"Application {app_id!r} not found")
    return app


@router.put("/{app_id}/notes", status_code=202)
async def edit_notes(app_id: str, edit: NotesEdit) -> dict:
    """Debounced notes edit; only the last edit in a burst is written."""
    _get_or_404(app_id)
    tracker_service.schedule_notes_edit(app_id, edit.notes)
    return {"status": "pending"}


@router.delete("/{app_id}/notes")
async def cancel_notes_edit(app_id: str) -> dict:
    """Drop a notes edit that has not been written yet."""
    return {"cancelled": tracker_service.cancel_pending_edit("notes", app_id)}


@router.delete("/{app_id}")
async def delete_application(app_id: str) -> dict:
    return {"deleted": tracker_service.delete_application(app_id)}


@router.post("/{app_id}/checklist", response_model=ChecklistItem, status_code=201)
async def add_checklist_task(app_id: str, task: ChecklistTaskCreate) -> ChecklistItem:
    item = tracker_service.add_checklist_task(app_id, task.text)
    if item is None:
        raise HTTPException(status_code=404, detail=f"Application {app_id!r} not found")
    return item


@router.post("/{app_id}/checklist/{task_id}/toggle")
async def toggle_checklist_task(app_id: str, task_id: str) -> dict:
    return {"toggled": tracker_service.toggle_checklist_task(app_id, task_id)}


@router.delete("/{app_id}/checklist/{task_id}")
async def delete_checklist_task(app_id: str, task_id: str) -> dict:
    return {"deleted": tracker_service.delete_checklist_task(app_id, task_id)}


@router.get("/{app_id}/essays", response_model=list[Essay])
async def list_application_essays(app_id: str) -> list[Essay]:
    _get_or_404(app_id)
    return tracker_service.list_essays_for_application(app_id)


@router.post("/{app_id}/essays/reorder", response_model=list[Essay])
async def reorder_essays(app_id: str, move: EssayReorder) -> list[Essay]:
    """Drag-and-drop reorder. Unknown ids leave the order as it was."""
    _get_or_404(app_id)
    tracker_service.reorder_essay(app_id, move.dragged_essay_id, move.target_essay_id)
    return tracker_service.list_essays_for_application(app_id)
