from __future__ import annotations

from datetime import date
from enum import Enum

from pydantic import BaseModel, Field

from tracker.models.application import Application, Outcome
from tracker.models.base import CamelModel
from tracker.models.tag import Tag


class SortMode(str, Enum):
    DEADLINE_ASC = "deadline-asc"
    SCHOOL_NAME_ASC = "schoolName-asc"
    SCHOOL_NAME_DESC = "schoolName-desc"
    DONENESS_ASC = "doneness-asc"
    DONENESS_DESC = "doneness-desc"


class EssaySortMode(str, Enum):
    DEADLINE_ASC = "deadline-asc"
    SCHOOL_NAME_ASC = "schoolName-asc"
    SCHOOL_NAME_DESC = "schoolName-desc"
    WORD_COUNT_ASC = "wordCount-asc"
    WORD_COUNT_DESC = "wordCount-desc"


class ViewFilter(BaseModel):
    selected_tag_ids: frozenset[str] = frozenset()
    search_query: str = ""

    model_config = {"frozen": True}


class SortInputs(BaseModel):
    """Everything that, when changed, forces a fresh sort."""

    sort_mode: str
    tag_selection: frozenset[str] = frozenset()
    search_query: str = ""
    refresh_counter: int = 0

    model_config = {"frozen": True}


class SortCache(BaseModel):
    last_inputs: SortInputs | None = None
    last_ordered_ids: tuple[str, ...] = ()

    model_config = {"frozen": True}


class ProgressSummary(CamelModel):
    submitted_applications: int = 0
    total_applications: int = 0
    completed_essays: int = 0
    total_essays: int = 0


class OutcomeCount(CamelModel):
    outcome: Outcome
    count: int


class TagProgress(CamelModel):
    tag: Tag
    completed: int
    total: int


class UpcomingDeadline(CamelModel):
    application: Application
    days_remaining: int = Field(ge=0)


class Dashboard(CamelModel):
    progress: ProgressSummary
    outcome_counts: list[OutcomeCount]
    essay_tag_progress: list[TagProgress]
    upcoming_deadlines: list[UpcomingDeadline]
    decision_timeline: list[Application]
    total_accepted_aid: float
    as_of: date


class ComparedSchool(CamelModel):
    application: Application
    net_cost: float
    lowest_cost: bool = False
    most_aid: bool = False


class Comparison(CamelModel):
    """Side-by-side view of accepted schools.

    ``available`` lists accepted schools not yet picked. The best values are
    None when nothing is being compared.
    """

    schools: list[ComparedSchool] = Field(default_factory=list)
    available: list[Application] = Field(default_factory=list)
    lowest_cost: float | None = None
    most_aid: float | None = None


class ViewState(CamelModel):
    """Sort and filter controls. Omitted fields keep their current value."""

    sort_mode: SortMode | None = None
    essay_sort_mode: EssaySortMode | None = None
    selected_tag_ids: list[str] | None = None
    search_query: str | None = None
