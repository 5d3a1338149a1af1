# backend/app/schemas/item.py
"""
Request and response bodies for /items.

The wire format is camelCase (photoUrl, createdAt); Python code uses the
snake_case field names. Both spellings are accepted on input.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, conint

from backend.app.db.base import MAX_ROW_ID
from backend.app.schemas.tag import TagResponse

RowId = conint(ge=1, le=MAX_ROW_ID)


class ItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    # Validated by the fingerprint codec, not here, so a malformed value
    # is a 400 from the store like every other domain validation error.
    fingerprint: str
    photo_url: Optional[str] = Field(default=None, alias="photoUrl")
    tags: List[RowId] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class ItemTagsUpdate(BaseModel):
    tags: List[RowId] = Field(default_factory=list)


class ItemCreated(BaseModel):
    id: int


class ItemTagsUpdated(BaseModel):
    status: str = "ok"
    tags: List[TagResponse]


class ItemResponse(BaseModel):
    id: int
    name: str
    fingerprint: str
    photo_url: Optional[str] = Field(default=None, alias="photoUrl")
    created_at: datetime = Field(alias="createdAt")
    # Never None: an untagged item has an empty list
    tags: List[TagResponse] = Field(default_factory=list)

    class Config:
        from_attributes = True
        populate_by_name = True
