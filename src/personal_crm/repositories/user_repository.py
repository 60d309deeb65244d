"""
User Repository

Data access layer for user records.
"""

from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
import logging

from personal_crm.models.user import User
from personal_crm.repositories.base import BaseRepository
from personal_crm.core.exceptions import DuplicateException

logger = logging.getLogger("USER_REPOSITORY")


class UserRepository(BaseRepository[User]):
    """Repository for user records."""

    def __init__(self, db: Session):
        super().__init__(User, db)

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def get_by_auth_subject(self, auth_subject: str) -> Optional[User]:
        return self.db.query(User).filter(User.auth_subject == auth_subject).first()

    def create_user(self, user_data: dict) -> User:
        existing = self.get_by_email(user_data.get("email"))
        if existing:
            raise DuplicateException("User", "email", user_data.get("email"))

        try:
            return self.create_from_dict(user_data)
        except IntegrityError as e:
            raise DuplicateException("User", "email", user_data.get("email")) from e

    def get_or_create(self, auth_subject: str, email: Optional[str] = None, name: Optional[str] = None) -> User:
        """
        Fetch the user for an identity-provider subject, creating it on first sight.

        Claims without an email or name get placeholder values so the
        required columns are always filled.
        """
        user = self.get_by_auth_subject(auth_subject)
        if user is not None:
            return user

        logger.info(f"Provisioning user for subject {auth_subject}")
        return self.create_user({
            "auth_subject": auth_subject,
            "email": email or f"{auth_subject}@unknown.local",
            "name": name or "Unknown User",
        })

    def list_ids(self) -> List[int]:
        """Every user id, ascending."""
        return [row.id for row in self.db.query(User.id).order_by(User.id).all()]
