from __future__ import annotations

from enum import Enum

from pydantic import Field

from tracker.models.base import CamelModel, new_id


class TagType(str, Enum):
    SCHOOL = "school"
    ESSAY = "essay"


class TagColor(str, Enum):
    ROSE = "rose"
    PINK = "pink"
    FUCHSIA = "fuchsia"
    PURPLE = "purple"
    VIOLET = "violet"
    INDIGO = "indigo"
    BLUE = "blue"
    SKY = "sky"
    CYAN = "cyan"
    TEAL = "teal"
    EMERALD = "emerald"
    GREEN = "green"
    LIME = "lime"
    YELLOW = "yellow"
    AMBER = "amber"
    ORANGE = "orange"
    RED = "red"


class Tag(CamelModel):
    id: str = Field(default_factory=new_id)
    name: str = Field(min_length=1)
    color: TagColor = TagColor.ROSE
    type: TagType


class TagUpdate(CamelModel):
    """Mutable tag fields. The id and type never change after creation."""

    name: str | None = Field(None, min_length=1)
    color: TagColor | None = None


class TagCreate(CamelModel):
    name: str = Field(min_length=1)
    color: TagColor = TagColor.ROSE
    type: TagType
