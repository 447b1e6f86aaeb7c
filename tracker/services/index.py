"""Derived lookups over the raw collections: essays grouped per application, tags by id."""
from __future__ import annotations

import locale
from collections.abc import Iterable

from tracker.models.application import Application
from tracker.models.essay import Essay
from tracker.models.snapshot import Snapshot
from tracker.models.tag import Tag, TagType


def name_key(name: str) -> str:
    """Sort key for display names, collated by the process locale (applied at startup)."""
    return locale.strxfrm(name.casefold())


def essays_by_application_id(
    essays: Iterable[Essay],
    applications: Iterable[Application] | None = None,
) -> dict[str, list[Essay]]:
    """Group essays under their application id, each group ascending by ``order``.

    When ``applications`` is given every application gets a key, including those
    without essays.
    """
    grouped: dict[str, list[Essay]] = {}
    if applications is not None:
        for app in applications:
            grouped[app.id] = []
    for essay in essays:
        grouped.setdefault(essay.application_id, []).append(essay)
    for group in grouped.values():
        group.sort(key=lambda e: e.order)
    return grouped


def tags_by_id(tags: Iterable[Tag]) -> dict[str, Tag]:
    return {tag.id: tag for tag in tags}


def resolve_tags(tag_ids: Iterable[str], lookup: dict[str, Tag]) -> list[Tag]:
    """Map ids to live tags. Ids of deleted tags are skipped."""
    return [lookup[tag_id] for tag_id in tag_ids if tag_id in lookup]


class RelationalIndex:
    """Lookups built once from a snapshot. Rebuilt, never patched, after each mutation."""

    def __init__(self, snapshot: Snapshot) -> None:
        self.essays_by_application_id = essays_by_application_id(
            snapshot.essays, snapshot.applications
        )
        self.tags_by_id = tags_by_id(snapshot.tags)
        self.applications_by_id = {app.id: app for app in snapshot.applications}

    def essays_for(self, application_id: str) -> list[Essay]:
        return self.essays_by_application_id.get(application_id, [])

    def tags_for(self, tag_ids: Iterable[str]) -> list[Tag]:
        return resolve_tags(tag_ids, self.tags_by_id)

    def tags_of_type(self, tag_type: TagType) -> list[Tag]:
        tags = [t for t in self.tags_by_id.values() if t.type == tag_type]
        return sorted(tags, key=lambda t: name_key(t.name))

    @property
    def school_tags(self) -> list[Tag]:
        return self.tags_of_type(TagType.SCHOOL)

    @property
    def essay_tags(self) -> list[Tag]:
        return self.tags_of_type(TagType.ESSAY)
