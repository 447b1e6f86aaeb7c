from __future__ import annotations

from pydantic import Field

from tracker.models.application import Application
from tracker.models.base import CamelModel
from tracker.models.essay import Essay
from tracker.models.tag import Tag


class Snapshot(CamelModel):
    """The three entity collections, saved and loaded as one unit."""

    applications: list[Application] = Field(default_factory=list)
    essays: list[Essay] = Field(default_factory=list)
    tags: list[Tag] = Field(default_factory=list)
