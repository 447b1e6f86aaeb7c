"""In-memory owner of the three entity collections and every mutation on them.

Entities are never modified in place: a mutation swaps in an updated copy, so a
snapshot handed out earlier keeps describing the state it was taken from.
Mutations that name an unknown id do nothing and report that through their
return value (False / None); the id may have been deleted by an earlier action.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone

from tracker.models.application import (
    Application,
    ApplicationCreate,
    ApplicationUpdate,
    ChecklistItem,
)
from tracker.models.essay import Essay, EssayCreate, EssayUpdate, EssayVersion
from tracker.models.snapshot import Snapshot
from tracker.models.tag import Tag, TagColor, TagType, TagUpdate

logger = logging.getLogger(__name__)


def _reindexed(essays: Iterable[Essay]) -> list[Essay]:
    """Copies of ``essays`` whose ``order`` matches their position."""
    return [
        essay if essay.order == position else essay.model_copy(update={"order": position})
        for position, essay in enumerate(essays)
    ]


def normalize_essay_orders(essays: list[Essay]) -> list[Essay]:
    """Make each application's essay orders exactly 0..n-1, keeping their relative order.

    Duplicate or gapped orders (hand-edited or imported data) are resolved by
    collection position.
    """
    positions = {essay.id: i for i, essay in enumerate(essays)}
    groups: dict[str, list[Essay]] = {}
    for essay in essays:
        groups.setdefault(essay.application_id, []).append(essay)

    fixed: dict[str, Essay] = {}
    for group in groups.values():
        group.sort(key=lambda e: (e.order, positions[e.id]))
        for essay in _reindexed(group):
            fixed[essay.id] = essay
    return [fixed[essay.id] for essay in essays]


class EntityStore:
    def __init__(self, snapshot: Snapshot | None = None) -> None:
        self._applications: list[Application] = []
        self._essays: list[Essay] = []
        self._tags: list[Tag] = []
        self.revision = 0
        if snapshot is not None:
            self.replace(snapshot)

    # -- reads ----------------------------------------------------------------

    def snapshot(self) -> Snapshot:
        return Snapshot.model_construct(
            applications=list(self._applications),
            essays=list(self._essays),
            tags=list(self._tags),
        )

    @property
    def applications(self) -> list[Application]:
        return list(self._applications)

    @property
    def essays(self) -> list[Essay]:
        return list(self._essays)

    @property
    def tags(self) -> list[Tag]:
        return list(self._tags)

    def get_application(self, app_id: str) -> Application | None:
        return next((a for a in self._applications if a.id == app_id), None)

    def get_essay(self, essay_id: str) -> Essay | None:
        return next((e for e in self._essays if e.id == essay_id), None)

    def get_tag(self, tag_id: str) -> Tag | None:
        return next((t for t in self._tags if t.id == tag_id), None)

    def sibling_essays(self, app_id: str) -> list[Essay]:
        """Essays of one application, ascending by order."""
        return sorted((e for e in self._essays if e.application_id == app_id), key=lambda e: e.order)

    # -- whole-store ----------------------------------------------------------

    def replace(self, snapshot: Snapshot) -> None:
        """Swap in all three collections at once (load and import)."""
        self._applications = list(snapshot.applications)
        self._essays = normalize_essay_orders(list(snapshot.essays))
        self._tags = list(snapshot.tags)
        self._touch()

    def _touch(self) -> None:
        self.revision += 1

    def _put_application(self, updated: Application) -> None:
        self._applications = [updated if a.id == updated.id else a for a in self._applications]
        self._touch()

    def _put_essays(self, updated: Iterable[Essay]) -> None:
        by_id = {essay.id: essay for essay in updated}
        self._essays = [by_id.get(e.id, e) for e in self._essays]
        self._touch()

    # -- applications ---------------------------------------------------------

    def add_application(self, data: ApplicationCreate, checklist: Iterable[str]) -> Application:
        app = Application(
            **data.model_dump(),
            notes="",
            checklist=[ChecklistItem(text=text) for text in checklist],
        )
        self._applications = [*self._applications, app]
        self._touch()
        logger.info("Added application %s (%s)", app.id, app.school_name)
        return app

    def update_application(self, app_id: str, changes: ApplicationUpdate) -> Application | None:
        app = self.get_application(app_id)
        if app is None:
            logger.debug("update_application: unknown id %s", app_id)
            return None
        # re-validate the merged record so a partial update cannot leave bad values behind
        updated = Application.model_validate(
            {**app.model_dump(), **changes.model_dump(exclude_unset=True)}
        )
        self._put_application(updated)
        return updated

    def delete_application(self, app_id: str) -> bool:
        if self.get_application(app_id) is None:
            logger.debug("delete_application: unknown id %s", app_id)
            return False
        self._applications = [a for a in self._applications if a.id != app_id]
        before = len(self._essays)
        self._essays = [e for e in self._essays if e.application_id != app_id]
        self._touch()
        logger.info("Deleted application %s and %d essay(s)", app_id, before - len(self._essays))
        return True

    # -- checklist ------------------------------------------------------------

    def add_checklist_task(self, app_id: str, text: str) -> ChecklistItem | None:
        app = self.get_application(app_id)
        if app is None:
            logger.debug("add_checklist_task: unknown application %s", app_id)
            return None
        task = ChecklistItem(text=text)
        self._put_application(app.model_copy(update={"checklist": [*app.checklist, task]}))
        return task

    def toggle_checklist_task(self, app_id: str, task_id: str) -> bool:
        app = self.get_application(app_id)
        if app is None or not any(t.id == task_id for t in app.checklist):
            logger.debug("toggle_checklist_task: unknown task %s/%s", app_id, task_id)
            return False
        checklist = [
            t.model_copy(update={"completed": not t.completed}) if t.id == task_id else t
            for t in app.checklist
        ]
        self._put_application(app.model_copy(update={"checklist": checklist}))
        return True

    def delete_checklist_task(self, app_id: str, task_id: str) -> bool:
        app = self.get_application(app_id)
        if app is None or not any(t.id == task_id for t in app.checklist):
            logger.debug("delete_checklist_task: unknown task %s/%s", app_id, task_id)
            return False
        checklist = [t for t in app.checklist if t.id != task_id]
        self._put_application(app.model_copy(update={"checklist": checklist}))
        return True

    # -- essays ---------------------------------------------------------------

    def add_essay(self, data: EssayCreate) -> Essay | None:
        if self.get_application(data.application_id) is None:
            logger.debug("add_essay: unknown application %s", data.application_id)
            return None
        essay = Essay(
            **data.model_dump(),
            order=len(self.sibling_essays(data.application_id)),
            history=[],
            completed=False,
        )
        self._essays = [*self._essays, essay]
        self._touch()
        return essay

    def update_essay(self, essay_id: str, changes: EssayUpdate) -> Essay | None:
        essay = self.get_essay(essay_id)
        if essay is None:
            logger.debug("update_essay: unknown id %s", essay_id)
            return None
        updated = Essay.model_validate(
            {**essay.model_dump(), **changes.model_dump(exclude_unset=True)}
        )
        self._put_essays([updated])
        return updated

    def toggle_essay_complete(self, essay_id: str) -> bool:
        essay = self.get_essay(essay_id)
        if essay is None:
            logger.debug("toggle_essay_complete: unknown id %s", essay_id)
            return False
        self._put_essays([essay.model_copy(update={"completed": not essay.completed})])
        return True

    def commit_essay_history(self, essay_id: str, current_text: str) -> Essay | None:
        """Snapshot ``current_text`` into the history and make it the live text.

        The caller passes the text it is showing because a debounced save of that
        text may not have reached the store yet.
        """
        essay = self.get_essay(essay_id)
        if essay is None:
            logger.debug("commit_essay_history: unknown id %s", essay_id)
            return None
        version = EssayVersion(text=current_text, timestamp=datetime.now(timezone.utc))
        updated = essay.model_copy(
            update={"text": current_text, "history": [version, *essay.history]}
        )
        self._put_essays([updated])
        return updated

    def restore_essay_version(self, essay_id: str, version_index: int) -> Essay | None:
        """Set the live text to a saved version. History itself is left alone."""
        essay = self.get_essay(essay_id)
        if essay is None or not 0 <= version_index < len(essay.history):
            logger.debug("restore_essay_version: nothing at %s[%d]", essay_id, version_index)
            return None
        updated = essay.model_copy(update={"text": essay.history[version_index].text})
        self._put_essays([updated])
        return updated

    def delete_essay(self, essay_id: str) -> bool:
        essay = self.get_essay(essay_id)
        if essay is None:
            logger.debug("delete_essay: unknown id %s", essay_id)
            return False
        self._essays = [e for e in self._essays if e.id != essay_id]
        # close the gap left in the siblings' orders
        self._put_essays(_reindexed(self.sibling_essays(essay.application_id)))
        return True

    def reorder_essay(self, app_id: str, dragged_id: str, target_id: str) -> bool:
        """Move the dragged essay to the target's slot (remove, then insert).

        Both essays must belong to ``app_id``. Essays of other applications keep
        their orders.
        """
        siblings = self.sibling_essays(app_id)
        ids = [e.id for e in siblings]
        if dragged_id not in ids or target_id not in ids:
            logger.debug("reorder_essay: %s or %s not in application %s", dragged_id, target_id, app_id)
            return False
        if dragged_id == target_id:
            return False

        dragged_index = ids.index(dragged_id)
        target_index = ids.index(target_id)
        dragged = siblings.pop(dragged_index)
        siblings.insert(target_index, dragged)
        self._put_essays(_reindexed(siblings))
        return True

    # -- tags -----------------------------------------------------------------

    def add_tag(self, name: str, color: TagColor, tag_type: TagType) -> Tag:
        tag = Tag(name=name, color=color, type=tag_type)
        self._tags = [*self._tags, tag]
        self._touch()
        return tag

    def update_tag(self, tag_id: str, changes: TagUpdate) -> Tag | None:
        tag = self.get_tag(tag_id)
        if tag is None:
            logger.debug("update_tag: unknown id %s", tag_id)
            return None
        updated = tag.model_copy(update=changes.model_dump(exclude_unset=True, exclude_none=True))
        self._tags = [updated if t.id == tag_id else t for t in self._tags]
        self._touch()
        return updated

    def delete_tag(self, tag_id: str) -> bool:
        """Remove the tag and every reference to it."""
        if self.get_tag(tag_id) is None:
            logger.debug("delete_tag: unknown id %s", tag_id)
            return False
        self._tags = [t for t in self._tags if t.id != tag_id]
        self._applications = [
            a.model_copy(update={"tag_ids": [i for i in a.tag_ids if i != tag_id]})
            if tag_id in a.tag_ids else a
            for a in self._applications
        ]
        self._essays = [
            e.model_copy(update={"tag_ids": [i for i in e.tag_ids if i != tag_id]})
            if tag_id in e.tag_ids else e
            for e in self._essays
        ]
        self._touch()
        return True
