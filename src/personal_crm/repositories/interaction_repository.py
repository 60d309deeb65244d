"""
Interaction Repository

Data access layer for interaction history.
"""

from typing import List
from sqlalchemy.orm import Session

from personal_crm.models.interaction import Interaction
from personal_crm.repositories.base import BaseRepository
from personal_crm.core.exceptions import DatabaseException


class InteractionRepository(BaseRepository[Interaction]):
    """Repository for interactions."""

    def __init__(self, db: Session):
        super().__init__(Interaction, db)

    def list_for_user(self, user_id: int) -> List[Interaction]:
        """Every interaction stamped with `user_id`, oldest first."""
        try:
            return (
                self.db.query(Interaction)
                .filter(Interaction.user_id == user_id)
                .order_by(Interaction.interaction_date, Interaction.id)
                .all()
            )
        except Exception as e:
            raise DatabaseException(f"Failed to list interactions for user {user_id}") from e

    def list_for_contact(self, user_id: int, contact_id: int) -> List[Interaction]:
        try:
            return (
                self.db.query(Interaction)
                .filter(Interaction.user_id == user_id, Interaction.contact_id == contact_id)
                .order_by(Interaction.interaction_date, Interaction.id)
                .all()
            )
        except Exception as e:
            raise DatabaseException(f"Failed to list interactions for contact {contact_id}") from e
