"""The tracker's public operations: reads over the current view, and mutations.

Every mutation goes through the EntityStore and, once it has settled, the full
snapshot is saved. Derived data (index, filtered lists, progress) is rebuilt
from the store rather than patched.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date
from typing import Any

from tracker.config import settings
from tracker.models.application import (
    Application,
    ApplicationCreate,
    ApplicationUpdate,
    ChecklistItem,
    Outcome,
)
from tracker.models.essay import Essay, EssayCreate, EssayUpdate
from tracker.models.export import ViewExport
from tracker.models.snapshot import Snapshot
from tracker.models.tag import Tag, TagColor, TagType, TagUpdate
from tracker.models.view import (
    Comparison,
    Dashboard,
    EssaySortMode,
    ProgressSummary,
    SortCache,
    SortInputs,
    SortMode,
    ViewFilter,
)
from tracker.services import aggregation
from tracker.services.debounce import Debouncer
from tracker.services.export_service import build_view_export
from tracker.services.filtering import filter_applications, filter_essays
from tracker.services.index import RelationalIndex
from tracker.services.snapshot_service import SnapshotService, load_seed, snapshot_service
from tracker.services.sorting import sort_applications, sort_essays, stable_sort
from tracker.services.store import EntityStore

logger = logging.getLogger(__name__)


class TrackerService:
    def __init__(
        self,
        store: EntityStore | None = None,
        snapshots: SnapshotService | None = snapshot_service,
        debouncer: Debouncer | None = None,
    ) -> None:
        self.store = store or EntityStore()
        # None disables saving (used by tests that only exercise the engine)
        self._snapshots = snapshots
        self.debouncer = debouncer or Debouncer()

        self.sort_mode = SortMode(settings.default_sort_mode)
        self.essay_sort_mode = EssaySortMode(settings.default_essay_sort_mode)
        self.view_filter = ViewFilter()
        self.refresh_counter = 0
        self._app_cache = SortCache()
        self._essay_cache = SortCache()

        self._index: RelationalIndex | None = None
        self._index_revision = -1

    # -- lifecycle ------------------------------------------------------------

    def load(self) -> None:
        if self._snapshots is None:
            self.store.replace(load_seed())
        else:
            self.store.replace(self._snapshots.load())
        self.view_filter = ViewFilter()
        self._reset_sort_caches()

    def shutdown(self) -> None:
        flushed = self.debouncer.flush()
        if flushed:
            logger.info("Flushed %d pending edit(s) on shutdown", flushed)

    def _settled(self, revision_before: int) -> None:
        if self.store.revision == revision_before or self._snapshots is None:
            return
        self._snapshots.save(self.store.snapshot())

    def _reset_sort_caches(self) -> None:
        self._app_cache = SortCache()
        self._essay_cache = SortCache()

    # -- derived data ---------------------------------------------------------

    @property
    def index(self) -> RelationalIndex:
        if self._index is None or self._index_revision != self.store.revision:
            self._index = RelationalIndex(self.store.snapshot())
            self._index_revision = self.store.revision
        return self._index

    @property
    def tags_by_id(self) -> dict[str, Tag]:
        return self.index.tags_by_id

    def _sort_inputs(self, mode: str, view_filter: ViewFilter) -> SortInputs:
        return SortInputs(
            sort_mode=mode,
            tag_selection=view_filter.selected_tag_ids,
            search_query=view_filter.search_query,
            refresh_counter=self.refresh_counter,
        )

    def list_applications(
        self,
        view_filter: ViewFilter | None = None,
        sort_mode: SortMode | None = None,
    ) -> list[Application]:
        """Filtered applications in stable display order."""
        view_filter = self.view_filter if view_filter is None else view_filter
        sort_mode = sort_mode or self.sort_mode
        index = self.index
        filtered = filter_applications(self.store.applications, view_filter, index)
        ordered, self._app_cache = stable_sort(
            filtered,
            self._sort_inputs(sort_mode.value, view_filter),
            self._app_cache,
            lambda apps: sort_applications(apps, sort_mode, index),
        )
        return ordered

    def list_essays_for_application(self, app_id: str) -> list[Essay]:
        return list(self.index.essays_for(app_id))

    def list_essays(
        self,
        view_filter: ViewFilter | None = None,
        sort_mode: EssaySortMode | None = None,
    ) -> list[Essay]:
        """Essay-centric view: filtered essays in stable display order."""
        view_filter = self.view_filter if view_filter is None else view_filter
        sort_mode = sort_mode or self.essay_sort_mode
        index = self.index
        filtered = filter_essays(self.store.essays, view_filter, index)
        ordered, self._essay_cache = stable_sort(
            filtered,
            self._sort_inputs(sort_mode.value, view_filter),
            self._essay_cache,
            lambda essays: sort_essays(essays, sort_mode, index),
        )
        return ordered

    def completion(self, app_id: str) -> float | None:
        app = self.store.get_application(app_id)
        if app is None:
            return None
        return aggregation.completion_percentage(app, self.index.essays_for(app_id))

    def progress_summary(self, visible: Iterable[Application] | None = None) -> ProgressSummary:
        """Progress over ``visible`` (defaults to the current filtered application list)."""
        if visible is None:
            index = self.index
            visible = filter_applications(self.store.applications, self.view_filter, index)
        return aggregation.progress_summary(visible, self.index.essays_by_application_id)

    def dashboard(self, today: date | None = None) -> Dashboard:
        today = today or date.today()
        apps = self.store.applications
        return Dashboard(
            progress=aggregation.dashboard_progress(apps, self.store.essays),
            outcome_counts=aggregation.outcome_counts(apps),
            essay_tag_progress=aggregation.essay_tag_progress(self.store.essays, self.tags_by_id),
            upcoming_deadlines=aggregation.upcoming_deadlines(apps, today),
            decision_timeline=aggregation.decision_timeline(apps),
            total_accepted_aid=aggregation.total_accepted_aid(apps),
            as_of=today,
        )

    def board(self) -> dict[Outcome, list[Application]]:
        return aggregation.applications_by_outcome(self.list_applications())

    def compare(self, selected_ids: Iterable[str]) -> Comparison:
        """Accepted schools side by side, in the order they were picked."""
        return aggregation.compare_schools(
            self.store.applications, list(selected_ids), settings.max_compared_schools
        )

    # -- view state -----------------------------------------------------------

    def set_view_state(
        self,
        sort_mode: SortMode | None = None,
        selected_tag_ids: Iterable[str] | None = None,
        search_query: str | None = None,
        essay_sort_mode: EssaySortMode | None = None,
    ) -> None:
        if sort_mode is not None:
            self.sort_mode = sort_mode
        if essay_sort_mode is not None:
            self.essay_sort_mode = essay_sort_mode
        self.view_filter = ViewFilter(
            selected_tag_ids=(
                frozenset(selected_tag_ids)
                if selected_tag_ids is not None
                else self.view_filter.selected_tag_ids
            ),
            search_query=search_query if search_query is not None else self.view_filter.search_query,
        )

    def refresh_sort(self) -> int:
        """Force the next listing to sort from scratch."""
        self.refresh_counter += 1
        return self.refresh_counter

    # -- applications ---------------------------------------------------------

    def add_application(self, data: ApplicationCreate) -> Application:
        rev = self.store.revision
        app = self.store.add_application(data, settings.default_checklist)
        self._settled(rev)
        return app

    def update_application(self, app_id: str, changes: ApplicationUpdate) -> Application | None:
        rev = self.store.revision
        if "notes" in changes.model_fields_set:
            # an explicit save wins over a notes edit still waiting to be written
            self.debouncer.cancel(("notes", app_id))
        app = self.store.update_application(app_id, changes)
        self._settled(rev)
        return app

    def delete_application(self, app_id: str) -> bool:
        rev = self.store.revision
        essay_ids = [e.id for e in self.index.essays_for(app_id)]
        deleted = self.store.delete_application(app_id)
        if deleted:
            self.debouncer.cancel(("notes", app_id))
            for essay_id in essay_ids:
                self.debouncer.cancel(("essay-text", essay_id))
        self._settled(rev)
        return deleted

    def add_checklist_task(self, app_id: str, text: str) -> ChecklistItem | None:
        rev = self.store.revision
        task = self.store.add_checklist_task(app_id, text)
        self._settled(rev)
        return task

    def toggle_checklist_task(self, app_id: str, task_id: str) -> bool:
        rev = self.store.revision
        toggled = self.store.toggle_checklist_task(app_id, task_id)
        self._settled(rev)
        return toggled

    def delete_checklist_task(self, app_id: str, task_id: str) -> bool:
        rev = self.store.revision
        deleted = self.store.delete_checklist_task(app_id, task_id)
        self._settled(rev)
        return deleted

    def schedule_notes_edit(self, app_id: str, notes: str) -> None:
        """Debounced notes write; a newer edit for the same application replaces it."""
        self.debouncer.schedule(
            ("notes", app_id),
            lambda: self.update_application(app_id, ApplicationUpdate(notes=notes)),
        )

    # -- essays ---------------------------------------------------------------

    def add_essay(self, data: EssayCreate) -> Essay | None:
        rev = self.store.revision
        essay = self.store.add_essay(data)
        self._settled(rev)
        return essay

    def update_essay(self, essay_id: str, changes: EssayUpdate) -> Essay | None:
        rev = self.store.revision
        if "text" in changes.model_fields_set:
            self.debouncer.cancel(("essay-text", essay_id))
        essay = self.store.update_essay(essay_id, changes)
        self._settled(rev)
        return essay

    def schedule_essay_text_edit(self, essay_id: str, text: str) -> None:
        """Debounced essay text write; a newer edit for the same essay replaces it."""
        self.debouncer.schedule(
            ("essay-text", essay_id),
            lambda: self.update_essay(essay_id, EssayUpdate(text=text)),
        )

    def cancel_pending_edit(self, kind: str, entity_id: str) -> bool:
        return self.debouncer.cancel((kind, entity_id))

    def toggle_essay_complete(self, essay_id: str) -> bool:
        rev = self.store.revision
        toggled = self.store.toggle_essay_complete(essay_id)
        self._settled(rev)
        return toggled

    def commit_essay_history(self, essay_id: str, current_text: str) -> Essay | None:
        rev = self.store.revision
        # the commit carries the newest text; an older pending write must not land after it
        self.debouncer.cancel(("essay-text", essay_id))
        essay = self.store.commit_essay_history(essay_id, current_text)
        self._settled(rev)
        return essay

    def restore_essay_version(self, essay_id: str, version_index: int) -> Essay | None:
        rev = self.store.revision
        self.debouncer.cancel(("essay-text", essay_id))
        essay = self.store.restore_essay_version(essay_id, version_index)
        self._settled(rev)
        return essay

    def delete_essay(self, essay_id: str) -> bool:
        rev = self.store.revision
        deleted = self.store.delete_essay(essay_id)
        if deleted:
            self.debouncer.cancel(("essay-text", essay_id))
        self._settled(rev)
        return deleted

    def reorder_essay(self, app_id: str, dragged_id: str, target_id: str) -> bool:
        rev = self.store.revision
        moved = self.store.reorder_essay(app_id, dragged_id, target_id)
        self._settled(rev)
        return moved

    # -- tags -----------------------------------------------------------------

    def add_tag(self, name: str, color: TagColor, tag_type: TagType) -> Tag:
        rev = self.store.revision
        tag = self.store.add_tag(name, color, tag_type)
        self._settled(rev)
        return tag

    def update_tag(self, tag_id: str, changes: TagUpdate) -> Tag | None:
        rev = self.store.revision
        tag = self.store.update_tag(tag_id, changes)
        self._settled(rev)
        return tag

    def delete_tag(self, tag_id: str) -> bool:
        rev = self.store.revision
        deleted = self.store.delete_tag(tag_id)
        if deleted and tag_id in self.view_filter.selected_tag_ids:
            self.set_view_state(selected_tag_ids=self.view_filter.selected_tag_ids - {tag_id})
        self._settled(rev)
        return deleted

    # -- import / export ------------------------------------------------------

    def export_snapshot(self) -> Snapshot:
        self.debouncer.flush()
        return self.store.snapshot()

    def export_view(self) -> ViewExport:
        """The displayed applications, in display order, as a read-only document."""
        self.debouncer.flush()
        return build_view_export(
            self.list_applications(),
            self.index,
            sort_mode=self.sort_mode,
            view_filter=self.view_filter,
        )

    def import_snapshot(self, data: Any) -> Snapshot:
        """Replace all three collections with validated ``data``.

        Raises ImportRejectedError and leaves the store untouched when the data
        is malformed.
        """
        validator = self._snapshots or snapshot_service
        snapshot = validator.validate_import(data)
        rev = self.store.revision
        self.debouncer.cancel_all()
        self.store.replace(snapshot)
        self._reset_sort_caches()
        self.view_filter = ViewFilter()
        self._settled(rev)
        logger.info(
            "Imported %d applications, %d essays, %d tags",
            len(snapshot.applications), len(snapshot.essays), len(snapshot.tags),
        )
        return self.store.snapshot()

    def reset_to_seed(self) -> Snapshot:
        return self.import_snapshot(load_seed().model_dump(by_alias=True, mode="json"))


tracker_service = TrackerService()
