"""
Pytest fixtures for Personal CRM testing.

Provides:
- In-memory SQLite engine and sessions
- Row factories for users, contacts, interactions and occasions
- Snapshot builders for the pure scheduling modules
- A FastAPI TestClient bound to the test database
"""

import pytest
from datetime import date, datetime
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Registers the SQLite foreign key listener used by cascading deletes
import personal_crm.core.database  # noqa: F401
from personal_crm.models import Base, Contact, Interaction, Occasion, User
from personal_crm.models.enums import RecurrenceKind
from personal_crm.services.interaction_recency import InteractionSnapshot
from personal_crm.services.occasion_recurrence import OccasionSnapshot, build_recurrence_rule


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture
def engine():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


# =============================================================================
# ROW FACTORIES
# =============================================================================

@pytest.fixture
def make_user(db_session):
    """Create and commit a user."""
    counter = {"n": 0}

    def _make(subject: Optional[str] = None, email: Optional[str] = None, name: str = "Test User") -> User:
        counter["n"] += 1
        subject = subject or f"subject-{counter['n']}"
        user = User(auth_subject=subject, email=email or f"{subject}@example.com", name=name)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture
def make_contact(db_session):
    """Create and commit a contact for a user."""

    def _make(user: User, first_name: str = "Ada", last_name: str = "Lovelace", email: Optional[str] = None) -> Contact:
        contact = Contact(user_id=user.id, first_name=first_name, last_name=last_name, email=email)
        db_session.add(contact)
        db_session.commit()
        db_session.refresh(contact)
        return contact

    return _make


@pytest.fixture
def make_interaction(db_session):
    """Create and commit an interaction."""

    def _make(contact: Contact, when: datetime, followup_priority: Optional[int] = None) -> Interaction:
        interaction = Interaction(
            user_id=contact.user_id,
            contact_id=contact.id,
            interaction_date=when,
            followup_priority=followup_priority,
        )
        db_session.add(interaction)
        db_session.commit()
        db_session.refresh(interaction)
        return interaction

    return _make


@pytest.fixture
def make_occasion(db_session):
    """Create and commit an occasion without going through request validation."""

    def _make(
        contact: Contact,
        on: date,
        name: str = "Birthday",
        recurring: bool = False,
        kind: Optional[RecurrenceKind] = None,
        interval: Optional[int] = None,
    ) -> Occasion:
        occasion = Occasion(
            user_id=contact.user_id,
            contact_id=contact.id,
            name=name,
            date=on,
            recurring=recurring,
            recurrence_kind=kind,
            recurring_interval=interval,
        )
        db_session.add(occasion)
        db_session.commit()
        db_session.refresh(occasion)
        return occasion

    return _make


# =============================================================================
# SNAPSHOT BUILDERS
# =============================================================================

def occasion_snapshot(
    on: date,
    occasion_id: int = 1,
    contact_id: int = 1,
    recurring: bool = False,
    kind: Optional[RecurrenceKind] = None,
    interval: Optional[int] = None,
    name: str = "Occasion",
) -> OccasionSnapshot:
    return OccasionSnapshot(
        id=occasion_id,
        contact_id=contact_id,
        user_id=1,
        name=name,
        date=on,
        rule=build_recurrence_rule(on, recurring, kind, interval),
    )


def interaction_snapshot(
    when: datetime,
    interaction_id: int = 1,
    contact_id: int = 1,
    followup_priority: Optional[int] = None,
) -> InteractionSnapshot:
    return InteractionSnapshot(
        id=interaction_id,
        contact_id=contact_id,
        user_id=1,
        interaction_date=when,
        followup_priority=followup_priority,
    )


# =============================================================================
# API FIXTURES
# =============================================================================

@pytest.fixture
def client(session_factory):
    """TestClient using the in-memory database and no ranking cache."""
    from fastapi.testclient import TestClient

    from personal_crm.core.database import get_db
    from personal_crm.core.dependencies import get_priority_cache_dep
    from personal_crm.main import app

    def _get_test_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_test_db
    app.dependency_overrides[get_priority_cache_dep] = lambda: None
    # Not used as a context manager, so the startup hook never touches a real database
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return {"X-Auth-Subject": "auth0|alice", "X-Auth-Email": "alice@example.com", "X-Auth-Name": "Alice"}


@pytest.fixture
def other_auth_headers():
    return {"X-Auth-Subject": "auth0|bob", "X-Auth-Email": "bob@example.com", "X-Auth-Name": "Bob"}
