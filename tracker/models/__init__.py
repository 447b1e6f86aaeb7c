from .tag import Tag, TagColor, TagCreate, TagType, TagUpdate
from .application import (
    Application,
    ApplicationCreate,
    ApplicationUpdate,
    ChecklistItem,
    ChecklistTaskCreate,
    NotesEdit,
    Outcome,
    SchoolLocation,
)
from .essay import (
    Essay,
    EssayCommit,
    EssayCreate,
    EssayReorder,
    EssayTextEdit,
    EssayUpdate,
    EssayVersion,
)
from .snapshot import Snapshot
from .view import (
    ComparedSchool,
    Comparison,
    Dashboard,
    EssaySortMode,
    ProgressSummary,
    SortCache,
    SortInputs,
    SortMode,
    ViewFilter,
    ViewState,
)
from .export import ViewExport

__all__ = [
    "Tag",
    "TagColor",
    "TagCreate",
    "TagType",
    "TagUpdate",
    "Application",
    "ApplicationCreate",
    "ApplicationUpdate",
    "ChecklistItem",
    "ChecklistTaskCreate",
    "NotesEdit",
    "Outcome",
    "SchoolLocation",
    "Essay",
    "EssayCommit",
    "EssayCreate",
    "EssayReorder",
    "EssayTextEdit",
    "EssayUpdate",
    "EssayVersion",
    "Snapshot",
    "ComparedSchool",
    "Comparison",
    "Dashboard",
    "EssaySortMode",
    "ProgressSummary",
    "SortCache",
    "SortInputs",
    "SortMode",
    "ViewFilter",
    "ViewState",
    "ViewExport",
]
