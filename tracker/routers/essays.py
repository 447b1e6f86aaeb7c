"""Essay endpoints, including the essay-centric list and version history."""
from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from tracker.models.essay import Essay, EssayCommit, EssayCreate, EssayTextEdit, EssayUpdate
from tracker.models.view import EssaySortMode
from tracker.services.tracker_service import tracker_service

router = APIRouter(prefix="/api/essays", tags=["essays"])


def _not_found(essay_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Essay {essay_id!r} not found")


@router.get("/", response_model=list[Essay])
async def list_essays(
    sort: EssaySortMode | None = None,
    tags: list[str] | None = Query(None, description="Selected tag ids"),
    q: str | None = Query(None, description="Search terms separated by ';'"),
) -> list[Essay]:
    tracker_service.set_view_state(essay_sort_mode=sort, selected_tag_ids=tags, search_query=q)
    return tracker_service.list_essays()


@router.post("/", response_model=Essay, status_code=201)
async def add_essay(data: EssayCreate) -> Essay:
    essay = tracker_service.add_essay(data)
    if essay is None:
        raise HTTPException(
            status_code=404, detail=f"Application {data.application_id!r} not found"
        )
    return essay


@router.get("/{essay_id}", response_model=Essay)
async def get_essay(essay_id: str) -> Essay:
    essay = tracker_service.store.get_essay(essay_id)
    if essay is None:
        raise _not_found(essay_id)
    return essay


@router.patch("/{essay_id}", response_model=Essay)
async def update_essay(essay_id: str, changes: EssayUpdate) -> Essay:
    essay = tracker_service.update_essay(essay_id, changes)
    if essay is None:
        raise _not_found(essay_id)
    return essay


@router.put("/{essay_id}/text", status_code=202)
async def edit_text(essay_id: str, edit: EssayTextEdit) -> dict:
    """Debounced text edit; only the last edit in a burst is written."""
    if tracker_service.store.get_essay(essay_id) is None:
        raise _not_found(essay_id)
    tracker_service.schedule_essay_text_edit(essay_id, edit.text)
    return {"status": "pending"}


@router.delete("/{essay_id}/text")
async def cancel_text_edit(essay_id: str) -> dict:
    return {"cancelled": tracker_service.cancel_pending_edit("essay-text", essay_id)}


@router.post("/{essay_id}/toggle")
async def toggle_complete(essay_id: str) -> dict:
    return {"toggled": tracker_service.toggle_essay_complete(essay_id)}


@router.post("/{essay_id}/commit", response_model=Essay)
async def commit_history(essay_id: str, commit: EssayCommit) -> Essay:
    essay = tracker_service.commit_essay_history(essay_id, commit.current_text)
    if essay is None:
        raise _not_found(essay_id)
    return essay


@router.post("/{essay_id}/restore/{version_index}", response_model=Essay)
async def restore_version(essay_id: str, version_index: int) -> Essay:
    essay = tracker_service.restore_essay_version(essay_id, version_index)
    if essay is None:
        raise HTTPException(
            status_code=404, detail=f"No version {version_index} for essay {essay_id!r}"
        )
    return essay


@router.delete("/{essay_id}")
async def delete_essay(essay_id: str) -> dict:
    return {"deleted": tracker_service.delete_essay(essay_id)}
