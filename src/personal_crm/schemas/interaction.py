"""
Interaction Pydantic Schemas
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


class CreateInteractionRequest(BaseModel):
    """Request schema for logging an interaction."""

    contact_id: int
    interaction_date: datetime
    notes: Optional[str] = None
    followup_priority: Optional[int] = Field(None, description="Higher means more urgent")


class UpdateInteractionRequest(BaseModel):
    """Request schema for editing an interaction."""

    interaction_date: Optional[datetime] = None
    notes: Optional[str] = None
    followup_priority: Optional[int] = None


class InteractionResponse(BaseModel):
    """Response schema for an interaction."""

    id: int
    contact_id: int
    interaction_date: datetime
    notes: Optional[str] = None
    followup_priority: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
