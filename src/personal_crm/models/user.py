"""
User ORM model.

Users are provisioned from the external identity provider on first request;
every other row hangs off a user and is removed with it.
"""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from personal_crm.models.base import Base, TimestampMixin


class User(TimestampMixin, Base):
    """User record keyed by the identity-provider subject."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    auth_subject = Column(String(100), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(100), unique=True, nullable=False, index=True)

    contacts = relationship(
        "Contact",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    tags = relationship(
        "Tag",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
