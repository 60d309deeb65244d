"""
Contact Repository

Data access layer for contacts and their tag links.
"""

from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.exc import IntegrityError

from personal_crm.models.contact import Contact, Tag
from personal_crm.repositories.base import BaseRepository
from personal_crm.core.exceptions import DuplicateException, DatabaseException


class ContactRepository(BaseRepository[Contact]):
    """Repository for contacts."""

    def __init__(self, db: Session):
        super().__init__(Contact, db)

    def get_by_email(self, email: str) -> Optional[Contact]:
        return self.db.query(Contact).filter(Contact.email == email).first()

    def list_for_user(self, user_id: int) -> List[Contact]:
        """Contacts ordered by last name, first name, then id."""
        try:
            return (
                self.db.query(Contact)
                .filter(Contact.user_id == user_id)
                .options(selectinload(Contact.tags))
                .order_by(Contact.last_name, Contact.first_name, Contact.id)
                .all()
            )
        except Exception as e:
            raise DatabaseException(f"Failed to list contacts for user {user_id}") from e

    def create_contact(self, user_id: int, contact_data: Dict[str, Any]) -> Contact:
        email = contact_data.get("email")
        if email and self.get_by_email(email):
            raise DuplicateException("Contact", "email", email)

        try:
            return self.create_from_dict({**contact_data, "user_id": user_id})
        except IntegrityError as e:
            raise DuplicateException("Contact", "email", email) from e

    def update_contact(self, contact: Contact, updates: Dict[str, Any]) -> Contact:
        email = updates.get("email")
        if email and email != contact.email:
            existing = self.get_by_email(email)
            if existing is not None and existing.id != contact.id:
                raise DuplicateException("Contact", "email", email)

        try:
            return self.apply_updates(contact, updates)
        except IntegrityError as e:
            raise DuplicateException("Contact", "email", email) from e

    def add_tag(self, contact: Contact, tag: Tag) -> bool:
        """Link a tag; returns False when the link already existed."""
        if tag in contact.tags:
            return False
        contact.tags.append(tag)
        self.update(contact)
        return True

    def remove_tag(self, contact: Contact, tag: Tag) -> bool:
        """Unlink a tag; returns False when there was no link."""
        if tag not in contact.tags:
            return False
        contact.tags.remove(tag)
        self.update(contact)
        return True
