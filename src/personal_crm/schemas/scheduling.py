"""
Scheduling Pydantic Schemas

Wire shapes for priority rankings and upcoming occasions. Rankings are
also what the ranking cache stores, so they round-trip through JSON.
"""

from datetime import date as date_type, datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from personal_crm.models.enums import OccurrenceStatus, PriorityReason, RecurrenceKind
from personal_crm.schemas.contact import ContactResponse
from personal_crm.schemas.interaction import InteractionResponse
from personal_crm.schemas.occasion import OccasionResponse
from personal_crm.services.occasion_recurrence import IntervalRecurrence, NextOccurrence
from personal_crm.services.priority_engine import PriorityEntry
from personal_crm.services.scheduler_service import ContactOverview, UpcomingOccasion


class NextOccurrenceResponse(BaseModel):
    """Next occurrence of one occasion."""

    occasion_id: int
    occasion_name: str
    status: OccurrenceStatus
    date: Optional[date_type] = None
    days_until: Optional[int] = None
    recurrence_kind: Optional[RecurrenceKind] = None

    @classmethod
    def from_occurrence(cls, occurrence: NextOccurrence) -> "NextOccurrenceResponse":
        rule = occurrence.occasion.rule
        kind = None
        if rule is not None:
            kind = RecurrenceKind.EVERY_N_DAYS if isinstance(rule, IntervalRecurrence) else RecurrenceKind.YEARLY
        return cls(
            occasion_id=occurrence.occasion.id,
            occasion_name=occurrence.occasion.name,
            status=occurrence.status,
            date=occurrence.date,
            days_until=occurrence.days_until,
            recurrence_kind=kind,
        )


class PriorityEntryResponse(BaseModel):
    """One ranked contact and the signals behind its place."""

    rank: Optional[int] = None
    contact_id: int
    display_name: str
    score: float
    reason: PriorityReason
    never_contacted: bool
    days_since_last_interaction: Optional[int] = None
    last_interaction_at: Optional[datetime] = None
    interaction_count: int = 0
    interaction_frequency: float = 0.0
    explicit_priority: Optional[int] = None
    cadence_overdue_days: Optional[float] = None
    nearest_occasion: Optional[NextOccurrenceResponse] = None

    @classmethod
    def from_entry(cls, entry: PriorityEntry, rank: Optional[int] = None) -> "PriorityEntryResponse":
        recency = entry.signals.recency
        nearest = entry.signals.nearest_occasion
        return cls(
            rank=rank,
            contact_id=entry.contact.id,
            display_name=entry.contact.display_name,
            score=entry.score,
            reason=entry.reason,
            never_contacted=recency.never_contacted,
            days_since_last_interaction=recency.days_since_last_interaction,
            last_interaction_at=recency.last_interaction_at,
            interaction_count=recency.interaction_count,
            interaction_frequency=recency.interaction_frequency,
            explicit_priority=recency.explicit_priority,
            cadence_overdue_days=recency.cadence_overdue_days,
            nearest_occasion=NextOccurrenceResponse.from_occurrence(nearest) if nearest else None,
        )


class PriorityListResponse(BaseModel):
    """A user's full follow-up ranking as of `today`."""

    today: date_type
    priorities: List[PriorityEntryResponse] = Field(default_factory=list)
    total_count: int = 0
    cached: bool = False

    @classmethod
    def from_entries(cls, today: date_type, entries: List[PriorityEntry]) -> "PriorityListResponse":
        priorities = [PriorityEntryResponse.from_entry(entry, rank) for rank, entry in enumerate(entries, start=1)]
        return cls(today=today, priorities=priorities, total_count=len(priorities))


class UpcomingOccasionResponse(BaseModel):
    """One occurrence inside the requested window."""

    contact_id: int
    display_name: str
    occasion_id: int
    occasion_name: str
    date: date_type
    days_until: int

    @classmethod
    def from_upcoming(cls, upcoming: UpcomingOccasion) -> "UpcomingOccasionResponse":
        return cls(
            contact_id=upcoming.contact.id,
            display_name=upcoming.contact.display_name,
            occasion_id=upcoming.occasion.id,
            occasion_name=upcoming.occasion.name,
            date=upcoming.date,
            days_until=upcoming.days_until,
        )


class UpcomingOccasionListResponse(BaseModel):
    """Occurrences within [today, today + window_days]."""

    today: date_type
    window_days: int
    occasions: List[UpcomingOccasionResponse] = Field(default_factory=list)
    total_count: int = 0


class ContactDetailResponse(BaseModel):
    """A contact with its history and where it stands for follow-up."""

    contact: ContactResponse
    interactions: List[InteractionResponse] = Field(default_factory=list)
    occasions: List[OccasionResponse] = Field(default_factory=list)
    next_occurrences: List[NextOccurrenceResponse] = Field(default_factory=list)
    priority: PriorityEntryResponse

    @classmethod
    def build(cls, contact, overview: ContactOverview) -> "ContactDetailResponse":
        return cls(
            contact=ContactResponse.model_validate(contact),
            interactions=[InteractionResponse.model_validate(i) for i in contact.interactions],
            occasions=[OccasionResponse.model_validate(o) for o in contact.occasions],
            next_occurrences=[NextOccurrenceResponse.from_occurrence(o) for o in overview.occurrences],
            priority=PriorityEntryResponse.from_entry(overview.entry),
        )
