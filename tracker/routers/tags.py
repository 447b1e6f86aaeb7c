"""Tag endpoints."""
from __future__ import annotations

from fastapi import APIRouter, HTTPException

from tracker.models.tag import Tag, TagCreate, TagType, TagUpdate
from tracker.services.tracker_service import tracker_service

router = APIRouter(prefix="/api/tags", tags=["tags"])


@router.get("/", response_model=list[Tag])
async def list_tags(type: TagType | None = None) -> list[Tag]:
    """All tags sorted by name, optionally only one type."""
    index = tracker_service.index
    if type is not None:
        return index.tags_of_type(type)
    return index.school_tags + index.essay_tags


@router.post("/", response_model=Tag, status_code=201)
async def add_tag(data: TagCreate) -> Tag:
    return tracker_service.add_tag(data.name, data.color, data.type)


@router.patch("/{tag_id}", response_model=Tag)
async def update_tag(tag_id: str, changes: TagUpdate) -> Tag:
    tag = tracker_service.update_tag(tag_id, changes)
    if tag is None:
        raise HTTPException(status_code=404, detail=f"Tag {tag_id!r} not found")
    return tag


@router.delete("/{tag_id}")
async def delete_tag(tag_id: str) -> dict:
    """Delete a tag and remove it from every application and essay."""
    return {"deleted": tracker_service.delete_tag(tag_id)}
