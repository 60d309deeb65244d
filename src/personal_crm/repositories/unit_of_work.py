"""
Unit of Work Pattern

Coordinates the repositories that share one database session so a request
or task works against a single, consistent view of the store.

Usage:
    with UnitOfWork(db) as uow:
        contact = uow.contacts.get_owned_or_fail(contact_id, user_id)
        interactions = uow.interactions.list_for_contact(user_id, contact.id)
"""

from sqlalchemy.orm import Session
import logging

from personal_crm.repositories.user_repository import UserRepository
from personal_crm.repositories.contact_repository import ContactRepository
from personal_crm.repositories.tag_repository import TagRepository
from personal_crm.repositories.interaction_repository import InteractionRepository
from personal_crm.repositories.occasion_repository import OccasionRepository

logger = logging.getLogger("UNIT_OF_WORK")


class UnitOfWork:
    """
    Unit of Work implementation for coordinating repositories.

    Attributes:
        db: SQLAlchemy database session
        users: UserRepository instance
        contacts: ContactRepository instance
        tags: TagRepository instance
        interactions: InteractionRepository instance
        occasions: OccasionRepository instance
    """

    def __init__(self, db: Session):
        self.db = db
        self._committed = False

        self.users = UserRepository(db)
        self.contacts = ContactRepository(db)
        self.tags = TagRepository(db)
        self.interactions = InteractionRepository(db)
        self.occasions = OccasionRepository(db)

        logger.debug("Unit of Work initialized with shared database session")

    def commit(self) -> None:
        try:
            self.db.commit()
            self._committed = True
            logger.debug("Unit of Work committed successfully")
        except Exception as e:
            logger.error(f"Error during commit, rolling back: {e}")
            self.rollback()
            raise

    def rollback(self) -> None:
        try:
            self.db.rollback()
            logger.debug("Unit of Work rolled back")
        except Exception as e:
            logger.error(f"Error during rollback: {e}")
            raise

    def close(self) -> None:
        self.db.close()
        logger.debug("Unit of Work session closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None and not self._committed:
            logger.warning(f"Exception in Unit of Work context, rolling back: {exc_type.__name__}")
            self.rollback()
        return False


class UnitOfWorkFactory:
    """
    Factory for creating Unit of Work instances from a session factory.

    Used by background tasks that run outside FastAPI's dependency injection.

    Usage:
        factory = UnitOfWorkFactory(get_session_factory())

        with factory.create() as uow:
            ...
    """

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def create(self) -> UnitOfWork:
        return UnitOfWork(self.session_factory())
