"""
ORM Models package.

This package contains all SQLAlchemy ORM models organized by domain.
All models are imported here for easy access and to ensure proper
model registration with SQLAlchemy.

Usage:
    from personal_crm.models import Contact, Interaction, Occasion
    from personal_crm.models.base import Base
    from personal_crm.models.enums import RecurrenceKind
"""

from personal_crm.models.base import Base, TimestampMixin
from personal_crm.models.enums import RecurrenceKind, OccurrenceStatus, PriorityReason

from personal_crm.models.user import User
from personal_crm.models.contact import Contact, Tag, contact_tags
from personal_crm.models.interaction import Interaction
from personal_crm.models.occasion import Occasion

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",

    # Enums
    "RecurrenceKind",
    "OccurrenceStatus",
    "PriorityReason",

    # Models
    "User",
    "Contact",
    "Tag",
    "contact_tags",
    "Interaction",
    "Occasion",
]
