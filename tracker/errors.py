"""Exceptions raised at the boundaries of the tracker (persistence, import, HTTP)."""
from __future__ import annotations


class TrackerError(Exception):
    """Base class for tracker errors."""


class SnapshotError(TrackerError):
    """Persisted or imported data does not have the expected shape."""


class ImportRejectedError(SnapshotError):
    """An import was refused. The message is meant to be shown to the user."""
