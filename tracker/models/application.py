from __future__ import annotations

from datetime import date
from enum import Enum

from pydantic import Field, field_validator

from tracker.models.base import CamelModel, OptionalDate, TagIds, new_id, reject_null


class Outcome(str, Enum):
    IN_PROGRESS = "In Progress"
    SUBMITTED = "Submitted"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"
    WAITLISTED = "Waitlisted"
    DEFERRED = "Deferred"
    WITHDRAWN = "Withdrawn"


class ChecklistItem(CamelModel):
    id: str = Field(default_factory=new_id)
    text: str
    completed: bool = False


class SchoolLocation(CamelModel):
    city: str = ""
    state: str = ""
    lat: float | None = None
    lng: float | None = None


class Application(CamelModel):
    id: str = Field(default_factory=new_id)
    school_name: str
    deadline: date
    outcome: Outcome = Outcome.IN_PROGRESS
    notes: str = ""
    checklist: list[ChecklistItem] = Field(default_factory=list)
    tag_ids: TagIds = Field(default_factory=list)
    decision_date: OptionalDate = None
    financial_aid: float | None = Field(None, ge=0)
    tuition_cost: float | None = Field(None, ge=0)
    response_deadline: OptionalDate = None
    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)
    location: SchoolLocation | None = None


class ApplicationCreate(CamelModel):
    """Fields the caller supplies; id, notes and checklist are filled in by the store."""

    school_name: str = Field(min_length=1)
    deadline: date
    outcome: Outcome = Outcome.IN_PROGRESS
    tag_ids: TagIds = Field(default_factory=list)
    decision_date: OptionalDate = None
    financial_aid: float | None = Field(None, ge=0)
    tuition_cost: float | None = Field(None, ge=0)
    response_deadline: OptionalDate = None
    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)
    location: SchoolLocation | None = None


class ApplicationUpdate(CamelModel):
    """Partial update. Only fields that were explicitly set are applied."""

    school_name: str | None = Field(None, min_length=1)
    deadline: date | None = None
    outcome: Outcome | None = None
    notes: str | None = None
    tag_ids: TagIds | None = None
    decision_date: OptionalDate = None
    financial_aid: float | None = Field(None, ge=0)
    tuition_cost: float | None = Field(None, ge=0)
    response_deadline: OptionalDate = None
    pros: list[str] | None = None
    cons: list[str] | None = None
    location: SchoolLocation | None = None

    check_required = field_validator(
        "school_name", "deadline", "outcome", "notes", "tag_ids", "pros", "cons", mode="before"
    )(reject_null)


class ChecklistTaskCreate(CamelModel):
    text: str = Field(min_length=1)


class NotesEdit(CamelModel):
    notes: str
