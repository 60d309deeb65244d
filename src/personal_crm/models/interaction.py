"""
Interaction ORM model.

One row per logged touchpoint with a contact. The owning user is stored
redundantly so every query can be scoped without a join.
"""

from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from personal_crm.models.base import Base, TimestampMixin


class Interaction(TimestampMixin, Base):
    """A dated interaction, optionally carrying a user-set follow-up priority."""

    __tablename__ = "interactions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    contact_id = Column(Integer, ForeignKey("contacts.id", ondelete="CASCADE"), nullable=False, index=True)
    interaction_date = Column(DateTime, nullable=False, index=True)
    notes = Column(Text, nullable=True)
    followup_priority = Column(Integer, nullable=True)

    contact = relationship("Contact", back_populates="interactions")
