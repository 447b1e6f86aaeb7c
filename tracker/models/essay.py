from __future__ import annotations

from datetime import datetime, timezone

from pydantic import Field, field_validator

from tracker.models.base import CamelModel, TagIds, new_id, reject_null


class EssayVersion(CamelModel):
    text: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"frozen": True}


class Essay(CamelModel):
    id: str = Field(default_factory=new_id)
    application_id: str
    prompt: str
    text: str = ""
    tag_ids: TagIds = Field(default_factory=list)
    order: int = Field(0, ge=0)
    history: list[EssayVersion] = Field(default_factory=list, description="Newest first")
    completed: bool = False


class EssayCreate(CamelModel):
    application_id: str
    prompt: str = Field(min_length=1)
    text: str = ""
    tag_ids: TagIds = Field(default_factory=list)


class EssayUpdate(CamelModel):
    """Partial update of the editable essay fields.

    ``order`` and ``history`` are absent: they only change through reorder and commit.
    """

    prompt: str | None = Field(None, min_length=1)
    text: str | None = None
    tag_ids: TagIds | None = None
    completed: bool | None = None

    check_required = field_validator("prompt", "text", "tag_ids", "completed", mode="before")(
        reject_null
    )


class EssayTextEdit(CamelModel):
    text: str


class EssayCommit(CamelModel):
    current_text: str


class EssayReorder(CamelModel):
    dragged_essay_id: str
    target_essay_id: str
