"""
Contact Pydantic Schemas
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict

from personal_crm.schemas.tag import TagResponse


class ContactBase(BaseModel):
    """Base contact fields."""

    first_name: Optional[str] = Field(None, max_length=50)
    last_name: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, min_length=3, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    short_note: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None


class CreateContactRequest(ContactBase):
    """Request schema for creating a contact."""


class BulkCreateContactsRequest(BaseModel):
    """Several contacts created in one request."""

    contacts: List[CreateContactRequest] = Field(..., min_length=1)


class UpdateContactRequest(ContactBase):
    """Request schema for updating a contact; only sent fields change."""


class BulkDeleteContactsRequest(BaseModel):
    """Contacts to delete in one request."""

    contact_ids: List[int] = Field(..., min_length=1)


class ContactResponse(ContactBase):
    """Response schema for a contact."""

    id: int
    tags: List[TagResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class ContactListResponse(BaseModel):
    """Response schema for listing contacts."""

    contacts: List[ContactResponse]
    total_count: int


class BulkCreateContactsResponse(BaseModel):
    """Ids created plus per-item failures."""

    contact_ids: List[int]
    errors: List[dict] = Field(default_factory=list)
    message: str
