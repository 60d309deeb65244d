"""
Occasion Repository

Data access layer for occasions.
"""

from typing import List
from sqlalchemy.orm import Session

from personal_crm.models.occasion import Occasion
from personal_crm.repositories.base import BaseRepository
from personal_crm.core.exceptions import DatabaseException


class OccasionRepository(BaseRepository[Occasion]):
    """Repository for occasions."""

    def __init__(self, db: Session):
        super().__init__(Occasion, db)

    def list_for_user(self, user_id: int) -> List[Occasion]:
        try:
            return (
                self.db.query(Occasion)
                .filter(Occasion.user_id == user_id)
                .order_by(Occasion.contact_id, Occasion.id)
                .all()
            )
        except Exception as e:
            raise DatabaseException(f"Failed to list occasions for user {user_id}") from e

    def list_for_contact(self, user_id: int, contact_id: int) -> List[Occasion]:
        try:
            return (
                self.db.query(Occasion)
                .filter(Occasion.user_id == user_id, Occasion.contact_id == contact_id)
                .order_by(Occasion.id)
                .all()
            )
        except Exception as e:
            raise DatabaseException(f"Failed to list occasions for contact {contact_id}") from e
