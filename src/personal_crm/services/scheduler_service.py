"""
Scheduler Service

Facade over the recurrence expander, recency tracker and priority engine.

Each operation loads one user's contacts, interactions and occasions,
ingests them into immutable snapshots (validating recurrence settings and
ownership before any scoring starts), then computes on those snapshots.
Nothing computed here is written back to the store.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from personal_crm.core.config import Settings, get_settings
from personal_crm.core.exceptions import (
    DataInconsistencyException,
    NotFoundException,
    ValidationException,
)
from personal_crm.repositories.unit_of_work import UnitOfWork
from personal_crm.services.base_service import BaseService
from personal_crm.services.interaction_recency import (
    InteractionSnapshot,
    compute_recency_signals,
)
from personal_crm.services.occasion_recurrence import (
    NextOccurrence,
    OccasionSnapshot,
    build_recurrence_rule,
    nearest_occurrence,
    next_occurrence,
    occurrences_within,
)
from personal_crm.services.priority_engine import (
    ContactSignals,
    ContactSnapshot,
    PriorityEngine,
    PriorityEntry,
)


@dataclass(frozen=True)
class UpcomingOccasion:
    """One concrete occurrence of an occasion inside a window."""
    contact: ContactSnapshot
    occasion: OccasionSnapshot
    date: date
    days_until: int


@dataclass
class UserDataset:
    """A user's ingested data, grouped by contact."""
    user_id: int
    contacts: Dict[int, ContactSnapshot] = field(default_factory=dict)
    interactions: Dict[int, List[InteractionSnapshot]] = field(default_factory=dict)
    occasions: Dict[int, List[OccasionSnapshot]] = field(default_factory=dict)


@dataclass(frozen=True)
class ContactOverview:
    """Priority entry and next occurrences for a single contact."""
    entry: PriorityEntry
    occurrences: List[NextOccurrence]


def _display_name(contact: Any) -> str:
    parts = [p for p in (getattr(contact, "first_name", None), getattr(contact, "last_name", None)) if p]
    return " ".join(parts) or getattr(contact, "email", None) or f"Contact {contact.id}"


def ingest_user_data(
    user_id: int,
    contacts: Iterable[Any],
    interactions: Iterable[Any],
    occasions: Iterable[Any],
    settings: Optional[Settings] = None,
) -> UserDataset:
    """
    Validate fetched rows and turn them into snapshots.

    Rows may be ORM instances or any objects exposing the same attributes.

    Args:
        user_id: The user the rows were fetched for
        contacts: Contact rows
        interactions: Interaction rows
        occasions: Occasion rows
        settings: Interval bounds come from here

    Returns:
        UserDataset keyed by contact id

    Raises:
        DataInconsistencyException: A row belongs to another user or to a
            contact missing from the fetched set
        ValidationException: An occasion has an unusable recurrence setting
    """
    settings = settings or get_settings()
    dataset = UserDataset(user_id=user_id)

    for contact in contacts:
        if contact.user_id != user_id:
            raise DataInconsistencyException("Contact", contact.id, contact.id, user_id)
        dataset.contacts[contact.id] = ContactSnapshot(
            id=contact.id,
            user_id=contact.user_id,
            display_name=_display_name(contact),
        )
        dataset.interactions[contact.id] = []
        dataset.occasions[contact.id] = []

    for interaction in interactions:
        if interaction.user_id != user_id or interaction.contact_id not in dataset.contacts:
            raise DataInconsistencyException("Interaction", interaction.id, interaction.contact_id, user_id)
        dataset.interactions[interaction.contact_id].append(InteractionSnapshot(
            id=interaction.id,
            contact_id=interaction.contact_id,
            user_id=interaction.user_id,
            interaction_date=interaction.interaction_date,
            followup_priority=interaction.followup_priority,
        ))

    for occasion in occasions:
        if occasion.user_id != user_id or occasion.contact_id not in dataset.contacts:
            raise DataInconsistencyException("Occasion", occasion.id, occasion.contact_id, user_id)
        try:
            rule = build_recurrence_rule(
                occasion.date,
                occasion.recurring,
                occasion.recurrence_kind,
                occasion.recurring_interval,
                max_interval_days=settings.max_recurring_interval_days,
                max_interval_years=settings.max_recurring_interval_years,
            )
        except ValidationException as e:
            raise ValidationException(
                f"Occasion {occasion.id}: {e.message}",
                {**e.details, "occasion_id": occasion.id},
            ) from e
        dataset.occasions[occasion.contact_id].append(OccasionSnapshot(
            id=occasion.id,
            contact_id=occasion.contact_id,
            user_id=occasion.user_id,
            name=occasion.name,
            date=occasion.date,
            rule=rule,
        ))

    return dataset


class SchedulerService(BaseService):
    """
    Follow-up scheduling for one user at a time.

    Calls for different users share no mutable state and may run in
    parallel. `today` is always supplied by the caller.
    """

    def __init__(
        self,
        db: Optional[Session] = None,
        settings: Optional[Settings] = None,
        engine: Optional[PriorityEngine] = None,
    ):
        super().__init__(db=db, service_name="SCHEDULER_SERVICE")
        self.settings = settings or get_settings()
        self.engine = engine or PriorityEngine(self.settings.imminent_occasion_horizon_days)

    def health_check(self) -> Dict[str, Any]:
        return {
            "status": "healthy",
            "details": {
                "imminent_horizon_days": self.engine.imminent_horizon_days,
                "database": "attached" if self.db is not None else "detached",
                "metrics": self.get_metrics(),
            },
        }

    # ========================================================================
    # Loading
    # ========================================================================

    def load_user_dataset(self, user_id: int) -> UserDataset:
        """
        Fetch and ingest everything a user owns.

        Raises:
            NotFoundException: If the user does not exist
        """
        uow = UnitOfWork(self._ensure_db())
        if uow.users.get(user_id) is None:
            raise NotFoundException("User", user_id)

        return ingest_user_data(
            user_id,
            uow.contacts.list_for_user(user_id),
            uow.interactions.list_for_user(user_id),
            uow.occasions.list_for_user(user_id),
            settings=self.settings,
        )

    # ========================================================================
    # Computation on ingested data
    # ========================================================================

    def contact_signals(self, dataset: UserDataset, contact_id: int, today: date) -> ContactSignals:
        return ContactSignals(
            contact=dataset.contacts[contact_id],
            recency=compute_recency_signals(
                contact_id,
                dataset.interactions[contact_id],
                today,
                frequency_window_days=self.settings.interaction_frequency_window_days,
            ),
            nearest_occasion=nearest_occurrence(dataset.occasions[contact_id], today),
        )

    def compute_signals(self, dataset: UserDataset, today: date) -> List[ContactSignals]:
        """
        Per-contact signals, fanned out over a thread pool for large address books.

        Output order follows contact id either way; the engine's sort decides
        the final ranking.
        """
        contact_ids = sorted(dataset.contacts)
        if len(contact_ids) <= self.settings.signal_fanout_threshold:
            return [self.contact_signals(dataset, cid, today) for cid in contact_ids]

        self.logger.info(
            f"Computing signals for {len(contact_ids)} contacts with {self.settings.signal_workers} workers"
        )
        with ThreadPoolExecutor(max_workers=self.settings.signal_workers) as executor:
            return list(executor.map(lambda cid: self.contact_signals(dataset, cid, today), contact_ids))

    def rank_dataset(self, dataset: UserDataset, today: date) -> List[PriorityEntry]:
        return self.engine.rank(self.compute_signals(dataset, today))

    def expand_upcoming(self, dataset: UserDataset, today: date, window_days: int) -> List[UpcomingOccasion]:
        """
        Every occurrence in [today, today + window_days], by date, then contact id,
        then occasion id.
        """
        self._validate_window(window_days)

        upcoming = []
        for contact_id, occasions in dataset.occasions.items():
            contact = dataset.contacts[contact_id]
            for occasion in occasions:
                for occurs_on in occurrences_within(occasion, today, window_days):
                    upcoming.append(UpcomingOccasion(
                        contact=contact,
                        occasion=occasion,
                        date=occurs_on,
                        days_until=(occurs_on - today).days,
                    ))

        upcoming.sort(key=lambda u: (u.date, u.contact.id, u.occasion.id))
        return upcoming

    def _validate_window(self, window_days: int) -> None:
        limit = self.settings.upcoming_window_max_days
        if window_days < 0 or window_days > limit:
            raise ValidationException(
                f"window_days must be between 0 and {limit}, got {window_days}",
                {"field": "window_days", "value": window_days},
            )

    # ========================================================================
    # Public operations
    # ========================================================================

    def recompute_priorities(self, user_id: int, today: date) -> List[PriorityEntry]:
        """
        Rank a user's contacts by follow-up need as of `today`.

        Args:
            user_id: Owning user
            today: Reference date

        Returns:
            Ranked PriorityEntry list; empty when the user has no contacts

        Raises:
            NotFoundException: If the user does not exist
            ValidationException: If an occasion has an unusable recurrence
            DataInconsistencyException: If fetched rows cross user boundaries
        """
        with self._timed_operation("recompute_priorities"):
            dataset = self.load_user_dataset(user_id)
            entries = self.rank_dataset(dataset, today)
            self.logger.info(f"Ranked {len(entries)} contacts for user {user_id} as of {today.isoformat()}")
            return entries

    def upcoming_occasions(self, user_id: int, today: date, window_days: int) -> List[UpcomingOccasion]:
        """
        Occasions falling within `window_days` of `today` for a user.

        Raises:
            NotFoundException: If the user does not exist
            ValidationException: If the window is out of range or an
                occasion has an unusable recurrence
            DataInconsistencyException: If fetched rows cross user boundaries
        """
        self._validate_window(window_days)
        with self._timed_operation("upcoming_occasions"):
            dataset = self.load_user_dataset(user_id)
            upcoming = self.expand_upcoming(dataset, today, window_days)
            self.logger.info(
                f"Found {len(upcoming)} occurrences for user {user_id} within {window_days} days of {today.isoformat()}"
            )
            return upcoming

    def contact_overview(self, user_id: int, contact_id: int, today: date) -> ContactOverview:
        """
        Priority entry and next occurrence of every occasion for one contact.

        Raises:
            NotFoundException: If the contact is not one of the user's
        """
        with self._timed_operation("contact_overview"):
            uow = UnitOfWork(self._ensure_db())
            contact = uow.contacts.get_owned_or_fail(contact_id, user_id)
            dataset = ingest_user_data(
                user_id,
                [contact],
                uow.interactions.list_for_contact(user_id, contact_id),
                uow.occasions.list_for_contact(user_id, contact_id),
                settings=self.settings,
            )
            signals = self.contact_signals(dataset, contact_id, today)
            occurrences = [next_occurrence(o, today) for o in dataset.occasions[contact_id]]
            return ContactOverview(entry=self.engine.evaluate(signals), occurrences=occurrences)
