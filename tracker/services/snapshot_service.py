"""Loading, saving and validating whole snapshots.

Bad data never reaches the store: a corrupt saved snapshot falls back to the
seed dataset, and a bad import is rejected with a message for the user.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import duckdb
import yaml
from pydantic import ValidationError

from tracker import db
from tracker.config import settings
from tracker.errors import ImportRejectedError, SnapshotError
from tracker.models.application import ChecklistItem
from tracker.models.snapshot import Snapshot

logger = logging.getLogger(__name__)


def check_shape(data: Any) -> dict[str, list]:
    """Require ``applications``, ``essays`` and ``tags`` to be present and list-shaped."""
    if not isinstance(data, dict):
        raise SnapshotError("Expected an object with applications, essays and tags")
    missing = [key for key in db.COLLECTIONS if not isinstance(data.get(key), list)]
    if missing:
        raise SnapshotError(f"Missing or non-list field(s): {', '.join(missing)}")
    return {key: data[key] for key in db.COLLECTIONS}


def parse_snapshot(data: Any) -> Snapshot:
    collections = check_shape(data)
    try:
        return Snapshot.model_validate(collections)
    except ValidationError as e:
        raise SnapshotError(f"Invalid entity data: {e.error_count()} error(s)") from e


def load_seed(path: Path | None = None) -> Snapshot:
    """Starter dataset. Every application gets a fresh default checklist."""
    path = path or settings.seed_path
    with open(path) as f:
        data = yaml.safe_load(f)
    for app in data.get("applications", []):
        app.setdefault(
            "checklist",
            [ChecklistItem(text=text).model_dump() for text in settings.default_checklist],
        )
    snapshot = parse_snapshot(data)
    logger.info(
        "Loaded seed data: %d applications, %d essays, %d tags",
        len(snapshot.applications), len(snapshot.essays), len(snapshot.tags),
    )
    return snapshot


class SnapshotService:
    def load(self) -> Snapshot:
        """Saved snapshot, or the seed dataset when none exists or it cannot be read."""
        try:
            raw = db.read_collections()
            if raw is None:
                logger.info("No saved snapshot at %s, starting from seed data", settings.db_path)
                return load_seed()
            snapshot = parse_snapshot(
                {key: [json.loads(payload) for payload in rows] for key, rows in raw.items()}
            )
        except (SnapshotError, json.JSONDecodeError, duckdb.Error) as e:
            logger.warning("Saved snapshot is unreadable (%s), falling back to seed data", e)
            return load_seed()
        logger.info(
            "Loaded snapshot: %d applications, %d essays, %d tags",
            len(snapshot.applications), len(snapshot.essays), len(snapshot.tags),
        )
        return snapshot

    def save(self, snapshot: Snapshot) -> None:
        db.write_collections({
            "applications": [(a.id, a.model_dump_json(by_alias=True)) for a in snapshot.applications],
            "essays": [(e.id, e.model_dump_json(by_alias=True)) for e in snapshot.essays],
            "tags": [(t.id, t.model_dump_json(by_alias=True)) for t in snapshot.tags],
        })
        logger.debug("Saved snapshot")

    def validate_import(self, data: Any) -> Snapshot:
        """Parse user-supplied data, raising ImportRejectedError with a readable reason."""
        try:
            snapshot = parse_snapshot(data)
        except SnapshotError as e:
            raise ImportRejectedError(f"Invalid data file format. {e}") from e

        app_ids = {app.id for app in snapshot.applications}
        orphans = [essay.id for essay in snapshot.essays if essay.application_id not in app_ids]
        if orphans:
            raise ImportRejectedError(
                f"Invalid data file format. {len(orphans)} essay(s) reference unknown applications"
            )
        for key in db.COLLECTIONS:
            ids = [entity.id for entity in getattr(snapshot, key)]
            if len(ids) != len(set(ids)):
                raise ImportRejectedError(f"Invalid data file format. Duplicate ids in {key}")
        return snapshot


snapshot_service = SnapshotService()
