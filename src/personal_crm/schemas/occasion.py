"""
Occasion Pydantic Schemas

Recurrence settings are checked here at write time, using the same rule
builder the scheduler applies when it ingests stored rows.
"""

from datetime import date as date_type, datetime
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict, model_validator

from personal_crm.core.config import get_settings
from personal_crm.core.exceptions import ValidationException
from personal_crm.models.enums import RecurrenceKind
from personal_crm.services.occasion_recurrence import build_recurrence_rule


def check_recurrence(
    base_date: date_type,
    recurring: bool,
    kind: Optional[RecurrenceKind],
    interval: Optional[int],
) -> None:
    """Raise ValidationException if the combination cannot recur."""
    settings = get_settings()
    build_recurrence_rule(
        base_date,
        recurring,
        kind,
        interval,
        max_interval_days=settings.max_recurring_interval_days,
        max_interval_years=settings.max_recurring_interval_years,
    )


class OccasionBase(BaseModel):
    """Base occasion fields."""

    name: str = Field(..., min_length=1, max_length=100)
    date: date_type
    recurring: bool = False
    recurrence_kind: Optional[RecurrenceKind] = Field(
        None, description="yearly or every_n_days; every_n_days when omitted on a recurring occasion"
    )
    recurring_interval: Optional[int] = Field(
        None, description="Years for yearly occasions, days for every_n_days occasions"
    )
    details: Optional[str] = None


class CreateOccasionRequest(OccasionBase):
    """Request schema for creating an occasion."""

    contact_id: int

    @model_validator(mode="after")
    def validate_recurrence(self):
        try:
            check_recurrence(self.date, self.recurring, self.recurrence_kind, self.recurring_interval)
        except ValidationException as e:
            raise ValueError(e.message)
        if self.recurring and self.recurrence_kind is None:
            self.recurrence_kind = RecurrenceKind.EVERY_N_DAYS
        return self


class UpdateOccasionRequest(BaseModel):
    """
    Request schema for updating an occasion.

    Recurrence is validated against the merged row by the API, since a
    partial update alone cannot tell whether the result is consistent.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    date: Optional[date_type] = None
    recurring: Optional[bool] = None
    recurrence_kind: Optional[RecurrenceKind] = None
    recurring_interval: Optional[int] = None
    details: Optional[str] = None


class OccasionResponse(OccasionBase):
    """Response schema for an occasion."""

    id: int
    contact_id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
