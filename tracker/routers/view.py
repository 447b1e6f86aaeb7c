"""View controls and aggregate figures."""
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Query

from tracker.models.application import Application
from tracker.models.view import Comparison, Dashboard, ProgressSummary, ViewState
from tracker.services.tracker_service import tracker_service

router = APIRouter(prefix="/api/view", tags=["view"])


def _current_state() -> ViewState:
    return ViewState(
        sort_mode=tracker_service.sort_mode,
        essay_sort_mode=tracker_service.essay_sort_mode,
        selected_tag_ids=sorted(tracker_service.view_filter.selected_tag_ids),
        search_query=tracker_service.view_filter.search_query,
    )


@router.get("/state", response_model=ViewState)
async def get_state() -> ViewState:
    return _current_state()


@router.put("/state", response_model=ViewState)
async def set_state(state: ViewState) -> ViewState:
    tracker_service.set_view_state(
        sort_mode=state.sort_mode,
        essay_sort_mode=state.essay_sort_mode,
        selected_tag_ids=state.selected_tag_ids,
        search_query=state.search_query,
    )
    return _current_state()


@router.post("/refresh-sort")
async def refresh_sort() -> dict:
    return {"refreshCounter": tracker_service.refresh_sort()}


@router.get("/progress", response_model=ProgressSummary)
async def progress() -> ProgressSummary:
    """Progress over the applications that pass the current filters."""
    return tracker_service.progress_summary()


@router.get("/dashboard", response_model=Dashboard)
async def dashboard(today: date | None = None) -> Dashboard:
    return tracker_service.dashboard(today)


@router.get("/board", response_model=dict[str, list[Application]])
async def board() -> dict[str, list[Application]]:
    return {outcome.value: apps for outcome, apps in tracker_service.board().items()}


@router.get("/compare", response_model=Comparison)
async def compare(
    ids: list[str] | None = Query(None, description="Accepted application ids, in pick order"),
) -> Comparison:
    """Net cost and aid of the picked accepted schools, with the best values flagged."""
    return tracker_service.compare(ids or [])
