"""
Contact and Tag ORM models.

Contacts belong to exactly one user. Tags are per-user labels attached to
contacts through the contact_tags association table; deleting either side
removes only the association row.
"""

from sqlalchemy import Column, Integer, String, Text, ForeignKey, Table, UniqueConstraint
from sqlalchemy.orm import relationship

from personal_crm.models.base import Base, TimestampMixin


contact_tags = Table(
    "contact_tags",
    Base.metadata,
    Column("contact_id", Integer, ForeignKey("contacts.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class Contact(TimestampMixin, Base):
    """A person tracked by a user."""

    __tablename__ = "contacts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    first_name = Column(String(50), nullable=True)
    last_name = Column(String(50), nullable=True)
    email = Column(String(100), unique=True, nullable=True)
    phone = Column(String(20), nullable=True)
    short_note = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    user = relationship("User", back_populates="contacts")
    tags = relationship("Tag", secondary=contact_tags, back_populates="contacts", order_by="Tag.name")
    interactions = relationship(
        "Interaction",
        back_populates="contact",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Interaction.interaction_date",
    )
    occasions = relationship(
        "Occasion",
        back_populates="contact",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Occasion.date",
    )

    @property
    def display_name(self) -> str:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) or self.email or f"Contact {self.id}"


class Tag(TimestampMixin, Base):
    """A user-defined label; names are unique per user."""

    __tablename__ = "tags"
    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_tags_user_name"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(50), nullable=False)
    details = Column(Text, nullable=True)
    color = Column(String(20), nullable=True)

    user = relationship("User", back_populates="tags")
    contacts = relationship("Contact", secondary=contact_tags, back_populates="tags")
