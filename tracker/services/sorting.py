"""Sorting that keeps the on-screen order still while the user works.

A fresh sort only happens when one of the sort inputs changes (sort mode, tag
selection, search query, refresh counter) or when the set of filtered ids
differs from the cached one. Otherwise the cached id order is replayed against
the current entities, so edits show up in place without items jumping around.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import date
from typing import TypeVar

from tracker.models.application import Application
from tracker.models.essay import Essay
from tracker.models.view import EssaySortMode, SortCache, SortInputs, SortMode
from tracker.services.aggregation import completion_percentage
from tracker.services.index import RelationalIndex, name_key

logger = logging.getLogger(__name__)

T = TypeVar("T", Application, Essay)


def count_words(text: str) -> int:
    return len(text.split())


def _sort_with_sentinel(
    items: Sequence[T],
    key: Callable[[T], float | None],
    descending: bool,
) -> list[T]:
    """Sort by ``key``; items whose key is None go last whichever the direction."""
    ranked = [item for item in items if key(item) is not None]
    unranked = [item for item in items if key(item) is None]
    ranked.sort(key=key, reverse=descending)
    return ranked + unranked


def sort_applications(
    applications: Sequence[Application],
    sort_mode: SortMode,
    index: RelationalIndex,
) -> list[Application]:
    """Fresh sort of ``applications``. Ties keep their input order."""
    if sort_mode == SortMode.SCHOOL_NAME_ASC:
        return sorted(applications, key=lambda a: name_key(a.school_name))
    if sort_mode == SortMode.SCHOOL_NAME_DESC:
        return sorted(applications, key=lambda a: name_key(a.school_name), reverse=True)
    if sort_mode in (SortMode.DONENESS_ASC, SortMode.DONENESS_DESC):
        percentages = {
            app.id: completion_percentage(app, index.essays_for(app.id)) for app in applications
        }
        return _sort_with_sentinel(
            applications,
            key=lambda a: percentages[a.id],
            descending=sort_mode == SortMode.DONENESS_DESC,
        )
    return sorted(applications, key=lambda a: a.deadline)


def sort_essays(
    essays: Sequence[Essay],
    sort_mode: EssaySortMode,
    index: RelationalIndex,
) -> list[Essay]:
    """Fresh sort of the essay-centric list. School/deadline modes use the parent application."""

    def parent_name(essay: Essay) -> str:
        parent = index.applications_by_id.get(essay.application_id)
        return name_key(parent.school_name) if parent else ""

    def parent_deadline(essay: Essay) -> tuple[date, str, int]:
        parent = index.applications_by_id.get(essay.application_id)
        if parent is None:
            return date.max, "", essay.order
        # essays of the same school stay together in their own order
        return parent.deadline, parent.id, essay.order

    if sort_mode == EssaySortMode.WORD_COUNT_ASC:
        return sorted(essays, key=lambda e: count_words(e.text))
    if sort_mode == EssaySortMode.WORD_COUNT_DESC:
        return sorted(essays, key=lambda e: count_words(e.text), reverse=True)
    if sort_mode == EssaySortMode.SCHOOL_NAME_ASC:
        return sorted(essays, key=lambda e: (parent_name(e), e.order))
    if sort_mode == EssaySortMode.SCHOOL_NAME_DESC:
        return sorted(essays, key=lambda e: (parent_name(e), -e.order), reverse=True)
    return sorted(essays, key=parent_deadline)


def needs_resort(cache: SortCache, inputs: SortInputs, current_ids: Sequence[str]) -> bool:
    """True when the sort inputs changed or an item entered or left the result."""
    if cache.last_inputs != inputs:
        return True
    cached = cache.last_ordered_ids
    return len(cached) != len(current_ids) or set(cached) != set(current_ids)


def stable_sort(
    items: Sequence[T],
    inputs: SortInputs,
    cache: SortCache,
    sort_fn: Callable[[Sequence[T]], list[T]],
) -> tuple[list[T], SortCache]:
    """Order ``items`` (already filtered) and return the cache to use next time.

    ``sort_fn`` performs a fresh sort; it is only called when ``needs_resort``.
    """
    current_ids = [item.id for item in items]
    if needs_resort(cache, inputs, current_ids):
        ordered = sort_fn(items)
        logger.debug("Re-sorted %d items (mode=%s)", len(ordered), inputs.sort_mode)
        return ordered, SortCache(
            last_inputs=inputs,
            last_ordered_ids=tuple(item.id for item in ordered),
        )

    by_id = {item.id: item for item in items}
    return [by_id[item_id] for item_id in cache.last_ordered_ids if item_id in by_id], cache
