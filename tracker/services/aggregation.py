"""Completion and progress figures computed from checklist and essay state."""
from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import date

from tracker.models.application import Application, Outcome
from tracker.models.essay import Essay
from tracker.models.tag import Tag
from tracker.models.view import (
    ComparedSchool,
    Comparison,
    OutcomeCount,
    ProgressSummary,
    TagProgress,
    UpcomingDeadline,
)
from tracker.services.index import name_key


def completion_percentage(app: Application, app_essays: Iterable[Essay]) -> float | None:
    """Percent of checklist items and essays completed.

    Returns None when the application has no tasks at all; callers sort that
    value after everything else.
    """
    app_essays = list(app_essays)
    total = len(app.checklist) + len(app_essays)
    if total == 0:
        return None
    done = sum(1 for item in app.checklist if item.completed)
    done += sum(1 for essay in app_essays if essay.completed)
    return done / total * 100


def progress_summary(
    visible_applications: Iterable[Application],
    essays_by_app: Mapping[str, list[Essay]],
) -> ProgressSummary:
    """Submitted applications and completed essays over the visible set."""
    apps = list(visible_applications)
    essays = [essay for app in apps for essay in essays_by_app.get(app.id, [])]
    return ProgressSummary(
        submitted_applications=sum(1 for app in apps if app.outcome != Outcome.IN_PROGRESS),
        total_applications=len(apps),
        completed_essays=sum(1 for essay in essays if essay.completed),
        total_essays=len(essays),
    )


def dashboard_progress(
    applications: Iterable[Application], essays: Iterable[Essay]
) -> ProgressSummary:
    """Overall progress for the dashboard. Withdrawn applications do not count as submitted."""
    apps = list(applications)
    essays = list(essays)
    return ProgressSummary(
        submitted_applications=sum(
            1 for app in apps if app.outcome not in (Outcome.IN_PROGRESS, Outcome.WITHDRAWN)
        ),
        total_applications=len(apps),
        completed_essays=sum(1 for essay in essays if essay.completed),
        total_essays=len(essays),
    )


def outcome_counts(applications: Iterable[Application]) -> list[OutcomeCount]:
    counts = {outcome: 0 for outcome in Outcome}
    for app in applications:
        counts[app.outcome] += 1
    return [OutcomeCount(outcome=outcome, count=count) for outcome, count in counts.items()]


def applications_by_outcome(
    applications: Iterable[Application],
) -> dict[Outcome, list[Application]]:
    """Board columns: one (possibly empty) list per outcome, input order kept."""
    grouped: dict[Outcome, list[Application]] = {outcome: [] for outcome in Outcome}
    for app in applications:
        grouped[app.outcome].append(app)
    return grouped


def essay_tag_progress(essays: Iterable[Essay], lookup: Mapping[str, Tag]) -> list[TagProgress]:
    tallies: dict[str, list[int]] = {}
    for essay in essays:
        for tag_id in essay.tag_ids:
            done_total = tallies.setdefault(tag_id, [0, 0])
            done_total[1] += 1
            if essay.completed:
                done_total[0] += 1

    progress = [
        TagProgress(tag=lookup[tag_id], completed=done, total=total)
        for tag_id, (done, total) in tallies.items()
        if tag_id in lookup
    ]
    return sorted(progress, key=lambda p: name_key(p.tag.name))


def upcoming_deadlines(applications: Iterable[Application], today: date) -> list[UpcomingDeadline]:
    upcoming = [
        UpcomingDeadline(application=app, days_remaining=(app.deadline - today).days)
        for app in applications
        if app.outcome != Outcome.WITHDRAWN and app.deadline >= today
    ]
    return sorted(upcoming, key=lambda item: item.days_remaining)


def decision_timeline(applications: Iterable[Application]) -> list[Application]:
    decided = [
        app for app in applications
        if app.decision_date is not None
        and app.outcome not in (Outcome.IN_PROGRESS, Outcome.SUBMITTED)
    ]
    return sorted(decided, key=lambda app: app.decision_date)


def net_cost(app: Application) -> float:
    return (app.tuition_cost or 0) - (app.financial_aid or 0)


def compare_schools(
    applications: Iterable[Application],
    selected_ids: Sequence[str],
    limit: int,
) -> Comparison:
    """Compare the picked accepted schools on cost and aid.

    Ids that are unknown, not accepted, or repeated are skipped, and at most
    ``limit`` schools are compared. Best-value flags need at least two schools;
    the most-aid flag also needs some aid.
    """
    accepted = {app.id: app for app in applications if app.outcome == Outcome.ACCEPTED}
    picked_ids = list(dict.fromkeys(i for i in selected_ids if i in accepted))[:limit]
    picked = [accepted[app_id] for app_id in picked_ids]
    available = [app for app in accepted.values() if app.id not in picked_ids]
    if not picked:
        return Comparison(available=available)

    lowest_cost = min(net_cost(app) for app in picked)
    most_aid = max(app.financial_aid or 0 for app in picked)
    highlight = len(picked) >= 2
    schools = [
        ComparedSchool(
            application=app,
            net_cost=net_cost(app),
            lowest_cost=highlight and net_cost(app) == lowest_cost,
            most_aid=highlight and most_aid > 0 and (app.financial_aid or 0) == most_aid,
        )
        for app in picked
    ]
    return Comparison(
        schools=schools, available=available, lowest_cost=lowest_cost, most_aid=most_aid
    )


def total_accepted_aid(applications: Iterable[Application]) -> float:
    return sum(app.financial_aid or 0 for app in applications if app.outcome == Outcome.ACCEPTED)
