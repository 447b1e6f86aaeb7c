"""Tag and free-text filtering for the application list and the essay list.

Selected tags are split by their type. School tags narrow applications with AND
(the application must carry every one), essay tags with OR (at least one essay
must carry any of them). A search query is split on ``;`` into terms that must
all match somewhere on the entity.
"""
from __future__ import annotations

from collections.abc import Iterable

from tracker.models.application import Application
from tracker.models.essay import Essay
from tracker.models.tag import TagType
from tracker.models.view import ViewFilter
from tracker.services.index import RelationalIndex


def parse_search_terms(search_query: str) -> list[str]:
    """``"Stanford; research ;"`` -> ``["stanford", "research"]``."""
    terms = (term.strip().lower() for term in search_query.split(";"))
    return [term for term in terms if term]


def partition_tag_selection(
    selected_tag_ids: Iterable[str], index: RelationalIndex
) -> tuple[set[str], set[str]]:
    """Split selected ids into (school ids, essay ids). Ids of deleted tags are dropped."""
    school_ids: set[str] = set()
    essay_ids: set[str] = set()
    for tag_id in selected_tag_ids:
        tag = index.tags_by_id.get(tag_id)
        if tag is None:
            continue
        if tag.type == TagType.SCHOOL:
            school_ids.add(tag_id)
        else:
            essay_ids.add(tag_id)
    return school_ids, essay_ids


def passes_school_tags(app: Application, school_ids: set[str]) -> bool:
    return school_ids.issubset(app.tag_ids)


def passes_essay_tags(essays: Iterable[Essay], essay_ids: set[str]) -> bool:
    if not essay_ids:
        return True
    return any(not essay_ids.isdisjoint(essay.tag_ids) for essay in essays)


def _contains(haystack: str, term: str) -> bool:
    return term in haystack.lower()


def _tag_names_match(tag_ids: Iterable[str], term: str, index: RelationalIndex) -> bool:
    return any(_contains(tag.name, term) for tag in index.tags_for(tag_ids))


def _essay_matches(essay: Essay, term: str, index: RelationalIndex) -> bool:
    return (
        _contains(essay.prompt, term)
        or _contains(essay.text, term)
        or _tag_names_match(essay.tag_ids, term, index)
    )


def application_matches_term(app: Application, term: str, index: RelationalIndex) -> bool:
    return (
        _contains(app.school_name, term)
        or _contains(app.notes, term)
        or _contains(app.outcome.value, term)
        or _tag_names_match(app.tag_ids, term, index)
        or any(_essay_matches(essay, term, index) for essay in index.essays_for(app.id))
    )


def essay_matches_term(essay: Essay, term: str, index: RelationalIndex) -> bool:
    if _essay_matches(essay, term, index):
        return True
    parent = index.applications_by_id.get(essay.application_id)
    return parent is not None and _contains(parent.school_name, term)


def filter_applications(
    applications: Iterable[Application],
    view_filter: ViewFilter,
    index: RelationalIndex,
) -> list[Application]:
    """Applications passing both the tag filter and the search, in input order."""
    school_ids, essay_ids = partition_tag_selection(view_filter.selected_tag_ids, index)
    terms = parse_search_terms(view_filter.search_query)

    result = []
    for app in applications:
        if not passes_school_tags(app, school_ids):
            continue
        if not passes_essay_tags(index.essays_for(app.id), essay_ids):
            continue
        if terms and not all(application_matches_term(app, term, index) for term in terms):
            continue
        result.append(app)
    return result


def filter_essays(
    essays: Iterable[Essay],
    view_filter: ViewFilter,
    index: RelationalIndex,
) -> list[Essay]:
    """Essay-centric filtering: each essay is judged on its own tags and its parent's."""
    school_ids, essay_ids = partition_tag_selection(view_filter.selected_tag_ids, index)
    terms = parse_search_terms(view_filter.search_query)

    result = []
    for essay in essays:
        parent = index.applications_by_id.get(essay.application_id)
        if parent is None:
            # orphaned essay, its application is gone
            continue
        if essay_ids and essay_ids.isdisjoint(essay.tag_ids):
            continue
        if school_ids and not passes_school_tags(parent, school_ids):
            continue
        if terms and not all(essay_matches_term(essay, term, index) for term in terms):
            continue
        result.append(essay)
    return result
