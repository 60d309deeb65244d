"""
Tag Repository

Data access layer for per-user tags.
"""

from typing import Any, Dict, Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from personal_crm.models.contact import Tag
from personal_crm.repositories.base import BaseRepository
from personal_crm.core.exceptions import DuplicateException


class TagRepository(BaseRepository[Tag]):
    """Repository for tags. Names are unique per user."""

    def __init__(self, db: Session):
        super().__init__(Tag, db)

    def get_by_name(self, user_id: int, name: str) -> Optional[Tag]:
        return self.db.query(Tag).filter(Tag.user_id == user_id, Tag.name == name).first()

    def create_tag(self, user_id: int, tag_data: Dict[str, Any]) -> Tag:
        name = tag_data.get("name")
        if self.get_by_name(user_id, name):
            raise DuplicateException("Tag", "name", name)

        try:
            return self.create_from_dict({**tag_data, "user_id": user_id})
        except IntegrityError as e:
            raise DuplicateException("Tag", "name", name) from e

    def update_tag(self, tag: Tag, updates: Dict[str, Any]) -> Tag:
        name = updates.get("name")
        if name and name != tag.name and self.get_by_name(tag.user_id, name):
            raise DuplicateException("Tag", "name", name)

        try:
            return self.apply_updates(tag, updates)
        except IntegrityError as e:
            raise DuplicateException("Tag", "name", name) from e
