"""
Tests for request schema validation.
"""

import pytest
from datetime import date

from pydantic import ValidationError

from personal_crm.models.enums import RecurrenceKind
from personal_crm.schemas.contact import BulkDeleteContactsRequest, CreateContactRequest
from personal_crm.schemas.occasion import CreateOccasionRequest, UpdateOccasionRequest


class TestCreateOccasionRequest:
    """Recurrence settings are checked when an occasion is written."""

    def test_one_off(self):
        request = CreateOccasionRequest(contact_id=1, name="Wedding", date=date(2024, 9, 1))
        assert request.recurring is False
        assert request.recurrence_kind is None

    def test_yearly(self):
        request = CreateOccasionRequest(
            contact_id=1, name="Birthday", date=date(1990, 3, 15),
            recurring=True, recurrence_kind="yearly", recurring_interval=1,
        )
        assert request.recurrence_kind == RecurrenceKind.YEARLY

    def test_recurring_defaults_to_every_n_days(self):
        request = CreateOccasionRequest(
            contact_id=1, name="Check-in", date=date(2024, 1, 1), recurring=True, recurring_interval=30,
        )
        assert request.recurrence_kind == RecurrenceKind.EVERY_N_DAYS

    def test_recurring_without_interval_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            CreateOccasionRequest(contact_id=1, name="Birthday", date=date(1990, 3, 15), recurring=True)
        assert "recurring_interval" in str(exc_info.value)

    @pytest.mark.parametrize("interval", [0, -1, 36501])
    def test_out_of_range_interval_rejected(self, interval):
        with pytest.raises(ValidationError):
            CreateOccasionRequest(
                contact_id=1, name="Check-in", date=date(2024, 1, 1),
                recurring=True, recurrence_kind="every_n_days", recurring_interval=interval,
            )

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError):
            CreateOccasionRequest(
                contact_id=1, name="x", date=date(2024, 1, 1),
                recurring=True, recurrence_kind="weekly", recurring_interval=1,
            )

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            CreateOccasionRequest(contact_id=1, name="", date=date(2024, 1, 1))

    def test_update_tracks_only_sent_fields(self):
        request = UpdateOccasionRequest(recurring_interval=2)
        assert request.model_dump(exclude_unset=True) == {"recurring_interval": 2}


class TestContactRequests:

    def test_all_fields_optional(self):
        assert CreateContactRequest().model_dump(exclude_unset=True) == {}

    def test_bulk_delete_needs_ids(self):
        with pytest.raises(ValidationError):
            BulkDeleteContactsRequest(contact_ids=[])
