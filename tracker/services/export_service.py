"""Builds the export document from the applications currently on screen."""
from __future__ import annotations

from collections.abc import Sequence

from tracker.models.application import Application
from tracker.models.export import (
    ExportedApplication,
    ExportedChecklistItem,
    ExportedEssay,
    ViewExport,
)
from tracker.models.view import SortMode, ViewFilter
from tracker.services.aggregation import completion_percentage
from tracker.services.index import RelationalIndex

NO_NOTES = "(No notes)"
NO_TEXT = "(No text written)"


def export_application(app: Application, index: RelationalIndex) -> ExportedApplication:
    essays = index.essays_for(app.id)
    return ExportedApplication(
        school_name=app.school_name,
        deadline=app.deadline,
        status=app.outcome,
        tags=[tag.name for tag in index.tags_for(app.tag_ids)],
        checklist=[
            ExportedChecklistItem(text=item.text, completed=item.completed)
            for item in app.checklist
        ],
        notes=app.notes or NO_NOTES,
        completion=completion_percentage(app, essays),
        essays=[
            ExportedEssay(
                prompt=essay.prompt,
                text=essay.text or NO_TEXT,
                tags=[tag.name for tag in index.tags_for(essay.tag_ids)],
            )
            for essay in essays
        ],
    )


def build_view_export(
    applications: Sequence[Application],
    index: RelationalIndex,
    sort_mode: SortMode,
    view_filter: ViewFilter,
) -> ViewExport:
    """One section per application, in the order given."""
    return ViewExport(
        sort_mode=sort_mode.value,
        search_query=view_filter.search_query,
        selected_tags=sorted(
            tag.name for tag in index.tags_for(view_filter.selected_tag_ids)
        ),
        applications=[export_application(app, index) for app in applications],
    )
