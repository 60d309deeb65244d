"""
Tests for the occasion recurrence expander.

Tests cover:
- One-off occasions (upcoming, due today, expired)
- Yearly occasions including Feb 29 anchors
- Fixed-cadence occasions
- Window expansion and restartable sequences
- Recurrence validation
"""

import pytest
from datetime import date, timedelta

from conftest import occasion_snapshot
from personal_crm.core.exceptions import ValidationException
from personal_crm.models.enums import OccurrenceStatus, RecurrenceKind
from personal_crm.services.occasion_recurrence import (
    IntervalRecurrence,
    OccurrenceSequence,
    YearlyRecurrence,
    build_recurrence_rule,
    nearest_occurrence,
    next_occurrence,
    occurrences_within,
)


YEARLY = RecurrenceKind.YEARLY
EVERY_N_DAYS = RecurrenceKind.EVERY_N_DAYS


class TestOneOffOccasions:
    """Non-recurring occasions occur once, on their base date."""

    def test_future_occasion_is_upcoming(self):
        occasion = occasion_snapshot(date(2024, 6, 10))
        result = next_occurrence(occasion, date(2024, 6, 1))
        assert result.status == OccurrenceStatus.UPCOMING
        assert result.date == date(2024, 6, 10)
        assert result.days_until == 9

    def test_occasion_today_is_due(self):
        occasion = occasion_snapshot(date(2024, 6, 1))
        result = next_occurrence(occasion, date(2024, 6, 1))
        assert result.status == OccurrenceStatus.DUE_TODAY
        assert result.days_until == 0

    def test_past_occasion_is_expired(self):
        occasion = occasion_snapshot(date(2024, 5, 1))
        result = next_occurrence(occasion, date(2024, 6, 1))
        assert result.status == OccurrenceStatus.EXPIRED
        assert result.is_expired
        assert result.date is None
        assert result.days_until is None

    def test_interval_ignored_when_not_recurring(self):
        assert build_recurrence_rule(date(2024, 1, 1), False, YEARLY, 5) is None


class TestYearlyOccasions:
    """Yearly occasions repeat on the base month and day."""

    def test_birthday_later_this_year(self):
        occasion = occasion_snapshot(date(1990, 3, 15), recurring=True, kind=YEARLY, interval=1)
        assert next_occurrence(occasion, date(2024, 1, 1)).date == date(2024, 3, 15)

    def test_birthday_already_passed_rolls_to_next_year(self):
        occasion = occasion_snapshot(date(1990, 3, 15), recurring=True, kind=YEARLY, interval=1)
        result = next_occurrence(occasion, date(2024, 3, 16))
        assert result.date == date(2025, 3, 15)
        assert result.status == OccurrenceStatus.UPCOMING

    def test_birthday_today_is_due(self):
        occasion = occasion_snapshot(date(1990, 3, 15), recurring=True, kind=YEARLY, interval=1)
        assert next_occurrence(occasion, date(2024, 3, 15)).status == OccurrenceStatus.DUE_TODAY

    def test_leap_day_falls_back_to_feb_28(self):
        occasion = occasion_snapshot(date(2000, 2, 29), recurring=True, kind=YEARLY, interval=1)
        assert next_occurrence(occasion, date(2023, 1, 1)).date == date(2023, 2, 28)

    def test_leap_day_kept_in_leap_years(self):
        occasion = occasion_snapshot(date(2000, 2, 29), recurring=True, kind=YEARLY, interval=1)
        assert next_occurrence(occasion, date(2023, 3, 1)).date == date(2024, 2, 29)

    def test_every_other_year(self):
        occasion = occasion_snapshot(date(2020, 5, 1), recurring=True, kind=YEARLY, interval=2)
        assert next_occurrence(occasion, date(2021, 6, 1)).date == date(2022, 5, 1)

    def test_future_base_date_is_first_occurrence(self):
        occasion = occasion_snapshot(date(2030, 1, 1), recurring=True, kind=YEARLY, interval=1)
        assert next_occurrence(occasion, date(2024, 1, 1)).date == date(2030, 1, 1)

    def test_yearly_rule_keeps_anchor(self):
        rule = build_recurrence_rule(date(1990, 3, 15), True, YEARLY, 3)
        assert rule == YearlyRecurrence(month=3, day=15, every_years=3)


class TestIntervalOccasions:
    """Fixed-cadence occasions repeat every N days from the base date."""

    def test_next_cycle_after_today(self):
        occasion = occasion_snapshot(date(2024, 1, 1), recurring=True, kind=EVERY_N_DAYS, interval=10)
        assert next_occurrence(occasion, date(2024, 1, 15)).date == date(2024, 1, 21)

    def test_cycle_landing_on_today_is_due(self):
        occasion = occasion_snapshot(date(2024, 1, 1), recurring=True, kind=EVERY_N_DAYS, interval=10)
        result = next_occurrence(occasion, date(2024, 1, 21))
        assert result.status == OccurrenceStatus.DUE_TODAY
        assert result.date == date(2024, 1, 21)

    def test_kind_defaults_to_every_n_days(self):
        assert build_recurrence_rule(date(2024, 1, 1), True, None, 14) == IntervalRecurrence(every_days=14)

    def test_far_future_today_is_constant_time(self):
        occasion = occasion_snapshot(date(1900, 1, 1), recurring=True, kind=EVERY_N_DAYS, interval=1)
        assert next_occurrence(occasion, date(9000, 1, 1)).date == date(9000, 1, 1)


class TestNextOccurrenceIsTight:
    """The next occurrence is on the rule's cycle, and the cycle before it has passed."""

    @pytest.mark.parametrize("base, today, kind, interval", [
        (date(1990, 3, 15), date(2024, 1, 1), YEARLY, 1),
        (date(1990, 3, 15), date(2024, 3, 16), YEARLY, 1),
        (date(2020, 5, 1), date(2021, 6, 1), YEARLY, 2),
        (date(2020, 5, 1), date(2022, 5, 2), YEARLY, 2),
        (date(1990, 12, 31), date(2024, 12, 31), YEARLY, 5),
        (date(2000, 2, 29), date(2023, 3, 1), YEARLY, 1),
        (date(2000, 2, 29), date(2021, 3, 1), YEARLY, 4),
        (date(2000, 2, 29), date(2001, 1, 1), YEARLY, 3),
        (date(2024, 1, 1), date(2024, 1, 15), EVERY_N_DAYS, 10),
        (date(2024, 1, 1), date(2024, 1, 21), EVERY_N_DAYS, 10),
        (date(2023, 12, 25), date(2024, 3, 1), EVERY_N_DAYS, 7),
        (date(2000, 2, 29), date(2024, 2, 28), EVERY_N_DAYS, 365),
    ])
    def test_no_earlier_cycle_on_or_after_today(self, base, today, kind, interval):
        occasion = occasion_snapshot(base, recurring=True, kind=kind, interval=interval)
        rule = build_recurrence_rule(base, True, kind, interval)
        found = next_occurrence(occasion, today).date
        assert found >= today

        if kind == YEARLY:
            assert (found.year - base.year) % interval == 0
            assert found == rule.on_year(found.year)
            previous = rule.on_year(found.year - interval)
        else:
            assert (found - base).days % interval == 0
            previous = found - timedelta(days=interval)
        assert previous < today

    def test_leap_day_every_three_years_lands_on_feb_28(self):
        occasion = occasion_snapshot(date(2000, 2, 29), recurring=True, kind=YEARLY, interval=3)
        assert next_occurrence(occasion, date(2001, 1, 1)).date == date(2003, 2, 28)


class TestCalendarLimits:
    """Sequences end cleanly at the end of the calendar."""

    def test_interval_past_date_max_expires(self):
        occasion = occasion_snapshot(date(9999, 12, 1), recurring=True, kind=EVERY_N_DAYS, interval=40)
        assert next_occurrence(occasion, date(9999, 12, 15)).status == OccurrenceStatus.EXPIRED

    def test_yearly_past_date_max_expires(self):
        occasion = occasion_snapshot(date(9999, 6, 1), recurring=True, kind=YEARLY, interval=1)
        assert next_occurrence(occasion, date(9999, 7, 1)).is_expired

    def test_sequence_stops_at_last_representable_date(self):
        occasion = occasion_snapshot(date(9999, 12, 1), recurring=True, kind=EVERY_N_DAYS, interval=30)
        assert list(OccurrenceSequence(occasion, date(9999, 12, 15))) == [date(9999, 12, 31)]

    def test_window_past_date_max_is_clamped(self):
        occasion = occasion_snapshot(date(2000, 12, 31), recurring=True, kind=YEARLY, interval=1)
        assert list(occurrences_within(occasion, date(9999, 12, 31), 30)) == [date(9999, 12, 31)]

    def test_window_past_date_max_without_occurrences(self):
        occasion = occasion_snapshot(date(1990, 3, 15), recurring=True, kind=YEARLY, interval=1)
        assert list(occurrences_within(occasion, date(9999, 12, 20), 3660)) == []


class TestOccurrenceWindows:
    """Expansion of occurrences within a window."""

    def test_window_is_inclusive(self):
        occasion = occasion_snapshot(date(2024, 1, 1), recurring=True, kind=EVERY_N_DAYS, interval=7)
        result = list(occurrences_within(occasion, date(2024, 1, 1), 21))
        assert result == [date(2024, 1, 1), date(2024, 1, 8), date(2024, 1, 15), date(2024, 1, 22)]

    def test_sequence_is_restartable(self):
        occasion = occasion_snapshot(date(2024, 1, 1), recurring=True, kind=EVERY_N_DAYS, interval=7)
        sequence = occurrences_within(occasion, date(2024, 1, 3), 30)
        assert list(sequence) == list(sequence)
        assert len(list(sequence)) == 4

    def test_zero_window_only_today(self):
        occasion = occasion_snapshot(date(1990, 3, 15), recurring=True, kind=YEARLY, interval=1)
        assert list(occurrences_within(occasion, date(2024, 3, 15), 0)) == [date(2024, 3, 15)]
        assert list(occurrences_within(occasion, date(2024, 3, 14), 0)) == []

    def test_one_off_outside_window(self):
        occasion = occasion_snapshot(date(2024, 2, 1))
        assert list(occurrences_within(occasion, date(2024, 1, 1), 10)) == []

    def test_negative_window_rejected(self):
        occasion = occasion_snapshot(date(2024, 2, 1))
        with pytest.raises(ValidationException):
            occurrences_within(occasion, date(2024, 1, 1), -1)


class TestNearestOccurrence:
    """Choosing the soonest occurrence among a contact's occasions."""

    def test_soonest_wins(self):
        occasions = [
            occasion_snapshot(date(2024, 2, 1), occasion_id=1),
            occasion_snapshot(date(2024, 1, 20), occasion_id=2),
        ]
        assert nearest_occurrence(occasions, date(2024, 1, 1)).occasion.id == 2

    def test_same_date_prefers_lower_id(self):
        occasions = [
            occasion_snapshot(date(2024, 2, 1), occasion_id=5),
            occasion_snapshot(date(2024, 2, 1), occasion_id=3),
        ]
        assert nearest_occurrence(occasions, date(2024, 1, 1)).occasion.id == 3

    def test_expired_occasions_skipped(self):
        occasions = [
            occasion_snapshot(date(2023, 12, 1), occasion_id=1),
            occasion_snapshot(date(2024, 3, 1), occasion_id=2),
        ]
        assert nearest_occurrence(occasions, date(2024, 1, 1)).occasion.id == 2

    def test_nothing_upcoming(self):
        assert nearest_occurrence([occasion_snapshot(date(2023, 1, 1))], date(2024, 1, 1)) is None
        assert nearest_occurrence([], date(2024, 1, 1)) is None


class TestRecurrenceValidation:
    """Recurring occasions need a usable interval."""

    @pytest.mark.parametrize("interval", [None, 0, -5, True, 2.5])
    def test_bad_interval_rejected(self, interval):
        with pytest.raises(ValidationException) as exc_info:
            build_recurrence_rule(date(2024, 1, 1), True, EVERY_N_DAYS, interval)
        assert exc_info.value.details["field"] == "recurring_interval"

    def test_day_interval_upper_bound(self):
        with pytest.raises(ValidationException):
            build_recurrence_rule(date(2024, 1, 1), True, EVERY_N_DAYS, 36501)

    def test_year_interval_upper_bound(self):
        with pytest.raises(ValidationException):
            build_recurrence_rule(date(2024, 1, 1), True, YEARLY, 101)

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationException) as exc_info:
            build_recurrence_rule(date(2024, 1, 1), True, "weekly", 1)
        assert exc_info.value.details["field"] == "recurrence_kind"

    def test_kind_accepts_plain_string(self):
        assert build_recurrence_rule(date(2024, 1, 1), True, "yearly", 1) == YearlyRecurrence(1, 1, 1)
