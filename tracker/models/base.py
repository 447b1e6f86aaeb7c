from __future__ import annotations

import uuid
from datetime import date
from typing import Annotated

from pydantic import AfterValidator, BaseModel, BeforeValidator
from pydantic.alias_generators import to_camel


def new_id() -> str:
    return str(uuid.uuid4())


def _dedupe(ids: list[str]) -> list[str]:
    return list(dict.fromkeys(ids))


def _blank_to_none(value: object) -> object:
    if isinstance(value, str) and not value.strip():
        return None
    return value


# Tag references keep insertion order but behave as a set
TagIds = Annotated[list[str], AfterValidator(_dedupe)]

# Optional dates arrive as "" from older exports
OptionalDate = Annotated[date | None, BeforeValidator(_blank_to_none)]


class CamelModel(BaseModel):
    """Entities are stored and exchanged with camelCase keys (schoolName, tagIds...)."""

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


def reject_null(value: object) -> object:
    """Partial updates may omit a field but not clear one that the entity requires."""
    if value is None:
        raise ValueError("may be omitted but not null")
    return value
