"""
Occasion ORM model.

A dated event tied to a contact. Recurring occasions carry an explicit
recurrence kind; recurring_interval is counted in years for yearly
occasions and in days for fixed-cadence ones.
"""

from sqlalchemy import Column, Integer, String, Text, Date, Boolean, Enum, ForeignKey
from sqlalchemy.orm import relationship

from personal_crm.models.base import Base, TimestampMixin
from personal_crm.models.enums import RecurrenceKind


class Occasion(TimestampMixin, Base):
    """Birthday, anniversary or any other dated event for a contact."""

    __tablename__ = "occasions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    contact_id = Column(Integer, ForeignKey("contacts.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    date = Column(Date, nullable=False)
    recurring = Column(Boolean, nullable=False, default=False)
    recurrence_kind = Column(
        Enum(RecurrenceKind, values_callable=lambda kinds: [k.value for k in kinds], name="recurrence_kind"),
        nullable=True,
    )
    recurring_interval = Column(Integer, nullable=True)
    details = Column(Text, nullable=True)

    contact = relationship("Contact", back_populates="occasions")
