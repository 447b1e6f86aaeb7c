from __future__ import annotations

from datetime import date

from pydantic import Field

from tracker.models.application import Outcome
from tracker.models.base import CamelModel


class ExportedEssay(CamelModel):
    prompt: str
    text: str
    tags: list[str] = Field(default_factory=list)


class ExportedChecklistItem(CamelModel):
    text: str
    completed: bool


class ExportedApplication(CamelModel):
    school_name: str
    deadline: date
    status: Outcome
    tags: list[str] = Field(default_factory=list)
    checklist: list[ExportedChecklistItem] = Field(default_factory=list)
    notes: str
    completion: float | None = Field(None, description="Percent complete, None when there are no tasks")
    essays: list[ExportedEssay] = Field(default_factory=list)


class ViewExport(CamelModel):
    """Read-only document built from the currently displayed applications."""

    title: str = "College Application Tracker Export"
    sort_mode: str
    search_query: str = ""
    selected_tags: list[str] = Field(default_factory=list)
    applications: list[ExportedApplication] = Field(default_factory=list)
