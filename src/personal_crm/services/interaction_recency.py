"""
Interaction Recency Tracker

Derives per-contact recency and frequency signals from interaction history.
Interactions dated after the reference date are ignored for every signal.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Optional

logger = logging.getLogger("INTERACTION_RECENCY")

DEFAULT_FREQUENCY_WINDOW_DAYS = 365


@dataclass(frozen=True)
class InteractionSnapshot:
    """Validated, immutable view of an interaction row."""
    id: int
    contact_id: int
    user_id: int
    interaction_date: datetime
    followup_priority: Optional[int] = None

    @property
    def day(self) -> date:
        return self.interaction_date.date()


@dataclass(frozen=True)
class RecencySignals:
    """
    Recency signals for one contact.

    Attributes:
        contact_id: Contact the signals describe
        interaction_count: Interactions on or before the reference date
        last_interaction_at: Timestamp of the most recent interaction
        days_since_last_interaction: Whole days since that interaction, None if never contacted
        interaction_frequency: Interactions per day over the trailing window
        explicit_priority: Latest non-null followup_priority, None if unset
        average_gap_days: Mean days between consecutive interactions (needs two)
        cadence_overdue_days: Days since last interaction beyond the average gap
    """
    contact_id: int
    interaction_count: int = 0
    last_interaction_at: Optional[datetime] = None
    days_since_last_interaction: Optional[int] = None
    interaction_frequency: float = 0.0
    explicit_priority: Optional[int] = None
    average_gap_days: Optional[float] = None
    cadence_overdue_days: Optional[float] = None

    @property
    def never_contacted(self) -> bool:
        return self.days_since_last_interaction is None

    @property
    def has_explicit_priority(self) -> bool:
        return self.explicit_priority is not None


def compute_recency_signals(
    contact_id: int,
    interactions: Iterable[InteractionSnapshot],
    today: date,
    frequency_window_days: int = DEFAULT_FREQUENCY_WINDOW_DAYS,
) -> RecencySignals:
    """
    Compute recency signals for a contact's history.

    Args:
        contact_id: Contact the interactions belong to
        interactions: The contact's interactions, in any order
        today: Reference date
        frequency_window_days: Length of the trailing window for the rate

    Returns:
        RecencySignals for the contact
    """
    if frequency_window_days <= 0:
        raise ValueError(f"frequency_window_days must be positive, got {frequency_window_days}")

    history = sorted(
        (i for i in interactions if i.day <= today),
        key=lambda i: (i.interaction_date, i.id),
    )
    if not history:
        return RecencySignals(contact_id=contact_id)

    last = history[-1]
    days_since = (today - last.day).days

    in_window = sum(1 for i in history if (today - i.day).days < frequency_window_days)
    frequency = in_window / frequency_window_days

    explicit = next(
        (i.followup_priority for i in reversed(history) if i.followup_priority is not None),
        None,
    )

    average_gap = None
    cadence_overdue = None
    if len(history) >= 2:
        total_gap = sum(
            (history[n].day - history[n - 1].day).days for n in range(1, len(history))
        )
        average_gap = total_gap / (len(history) - 1)
        cadence_overdue = days_since - average_gap

    return RecencySignals(
        contact_id=contact_id,
        interaction_count=len(history),
        last_interaction_at=last.interaction_date,
        days_since_last_interaction=days_since,
        interaction_frequency=frequency,
        explicit_priority=explicit,
        average_gap_days=average_gap,
        cadence_overdue_days=cadence_overdue,
    )
