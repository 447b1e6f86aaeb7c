"""Shared fixtures: a small dataset, stores and services built on it, and a throwaway database."""
from __future__ import annotations

from datetime import date

import pytest

from tracker import db
from tracker.config import settings
from tracker.models import (
    Application,
    ChecklistItem,
    Essay,
    Outcome,
    Snapshot,
    Tag,
    TagColor,
    TagType,
)
from tracker.services.debounce import Debouncer
from tracker.services.index import RelationalIndex
from tracker.services.store import EntityStore
from tracker.services.tracker_service import TrackerService


def _checklist(done: int, total: int) -> list[ChecklistItem]:
    return [ChecklistItem(text=f"task {i}", completed=i < done) for i in range(total)]


@pytest.fixture
def snapshot() -> Snapshot:
    """Three schools.

    - stanford: 3 checklist items (2 done), 2 essays (1 done) -> 60%
    - berkeley: no checklist, no essays -> no tasks
    - mit: 3 checklist items (none done), 1 essay -> 0%
    """
    tags = [
        Tag(id="reach", name="Reach", color=TagColor.RED, type=TagType.SCHOOL),
        Tag(id="private", name="Private", color=TagColor.VIOLET, type=TagType.SCHOOL),
        Tag(id="why-us", name="Why Us?", color=TagColor.BLUE, type=TagType.ESSAY),
        Tag(id="personal", name="Personal Statement", color=TagColor.PURPLE, type=TagType.ESSAY),
    ]
    applications = [
        Application(
            id="stanford",
            school_name="Stanford University",
            deadline=date(2025, 1, 5),
            notes="Remember to mention my research with Prof. Smith.",
            checklist=_checklist(done=2, total=3),
            tag_ids=["reach", "private"],
        ),
        Application(
            id="berkeley",
            school_name="Berkeley",
            deadline=date(2024, 11, 30),
            outcome=Outcome.SUBMITTED,
            tag_ids=["reach"],
        ),
        Application(
            id="mit",
            school_name="MIT",
            deadline=date(2025, 1, 6),
            checklist=_checklist(done=0, total=3),
            tag_ids=["private"],
        ),
    ]
    essays = [
        Essay(
            id="stanford-why",
            application_id="stanford",
            prompt="Why Stanford?",
            text="one two three",
            tag_ids=["why-us"],
            order=0,
            completed=True,
        ),
        Essay(
            id="stanford-personal",
            application_id="stanford",
            prompt="Reflect on an idea that excites you.",
            text="",
            tag_ids=["personal"],
            order=1,
        ),
        Essay(
            id="mit-world",
            application_id="mit",
            prompt="Describe the world you come from.",
            text="a b c d e f",
            tag_ids=["why-us"],
            order=0,
        ),
    ]
    return Snapshot(applications=applications, essays=essays, tags=tags)


@pytest.fixture
def index(snapshot: Snapshot) -> RelationalIndex:
    return RelationalIndex(snapshot)


@pytest.fixture
def store(snapshot: Snapshot) -> EntityStore:
    return EntityStore(snapshot)


@pytest.fixture
def service(store: EntityStore) -> TrackerService:
    """Service over the sample data, without persistence."""
    return TrackerService(store=store, snapshots=None, debouncer=Debouncer(delay=0.02))


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    """Point the DuckDB connection at a fresh file for the duration of a test."""
    path = tmp_path / "tracker.duckdb"
    db.close()
    monkeypatch.setattr(settings, "db_path", path)
    yield path
    db.close()
