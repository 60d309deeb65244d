"""
Enumeration types used across ORM models.

This module centralizes all enum definitions to ensure consistency
across the application and make them easy to import.
"""

import enum


class RecurrenceKind(str, enum.Enum):
    """
    How a recurring occasion repeats.

    Attributes:
        YEARLY: Calendar-anchored on the base month/day, every N years
        EVERY_N_DAYS: Fixed cadence of N days from the base date
    """
    YEARLY = "yearly"
    EVERY_N_DAYS = "every_n_days"


class OccurrenceStatus(str, enum.Enum):
    """
    Where an occasion's next occurrence falls relative to the reference date.

    Attributes:
        DUE_TODAY: The next occurrence is the reference date itself
        UPCOMING: The next occurrence is after the reference date
        EXPIRED: A one-off occasion whose date has passed
    """
    DUE_TODAY = "due_today"
    UPCOMING = "upcoming"
    EXPIRED = "expired"


class PriorityReason(str, enum.Enum):
    """
    Which ranking rule placed a contact where it is.

    Attributes:
        IMMINENT_OCCASION: An occasion falls within the imminent horizon
        EXPLICIT_PRIORITY: The user set a follow-up priority on an interaction
        RECENCY: Ranked by time since the last interaction
    """
    IMMINENT_OCCASION = "imminent_occasion"
    EXPLICIT_PRIORITY = "explicit_priority"
    RECENCY = "recency"
