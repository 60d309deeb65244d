"""
Tag Pydantic Schemas
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict


class TagBase(BaseModel):
    """Base tag fields."""

    name: str = Field(..., min_length=1, max_length=50)
    details: Optional[str] = None
    color: Optional[str] = Field(None, max_length=20)


class CreateTagRequest(TagBase):
    """Request schema for creating a tag."""


class UpdateTagRequest(BaseModel):
    """Request schema for updating a tag."""

    name: Optional[str] = Field(None, min_length=1, max_length=50)
    details: Optional[str] = None
    color: Optional[str] = Field(None, max_length=20)


class TagResponse(TagBase):
    """Response schema for a tag."""

    id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class TagListResponse(BaseModel):
    """Response schema for listing tags."""

    tags: List[TagResponse]
    total_count: int


class BulkTagAssignRequest(BaseModel):
    """Contacts to label with one tag."""

    contact_ids: List[int] = Field(..., min_length=1)
