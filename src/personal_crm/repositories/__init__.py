"""
Repositories package.

This package contains all data access layer repositories following the Repository Pattern.
Each repository extends BaseRepository and provides domain-specific data operations.

Usage:
    from personal_crm.repositories import ContactRepository, UnitOfWork
    from personal_crm.core.database import get_db

    def get_contacts(db: Session = Depends(get_db)):
        return ContactRepository(db).list_for_user(user.id)
"""

from personal_crm.repositories.base import BaseRepository
from personal_crm.repositories.user_repository import UserRepository
from personal_crm.repositories.contact_repository import ContactRepository
from personal_crm.repositories.tag_repository import TagRepository
from personal_crm.repositories.interaction_repository import InteractionRepository
from personal_crm.repositories.occasion_repository import OccasionRepository
from personal_crm.repositories.unit_of_work import UnitOfWork, UnitOfWorkFactory

__all__ = [
    "BaseRepository",
    "UserRepository",
    "ContactRepository",
    "TagRepository",
    "InteractionRepository",
    "OccasionRepository",
    "UnitOfWork",
    "UnitOfWorkFactory",
]
