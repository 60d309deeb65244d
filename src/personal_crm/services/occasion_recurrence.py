"""
Occasion Recurrence Expander

Turns an occasion into concrete occurrence dates relative to a reference
date. Two recurrence kinds are supported:

- yearly: anchored on the base date's month/day, every N years. A Feb 29
  anchor lands on Feb 28 in years without a leap day.
- every_n_days: a fixed cadence of N days from the base date.

All lookups are constant-time arithmetic on the elapsed span; nothing here
steps through the calendar one cycle at a time.
"""

import calendar
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Iterator, Optional, Union

from personal_crm.core.exceptions import ValidationException
from personal_crm.models.enums import OccurrenceStatus, RecurrenceKind

logger = logging.getLogger("OCCASION_RECURRENCE")

DEFAULT_MAX_INTERVAL_DAYS = 36500
DEFAULT_MAX_INTERVAL_YEARS = 100


@dataclass(frozen=True)
class YearlyRecurrence:
    """Same month/day every `every_years` years."""
    month: int
    day: int
    every_years: int = 1

    def on_year(self, year: int) -> date:
        if self.month == 2 and self.day == 29 and not calendar.isleap(year):
            return date(year, 2, 28)
        return date(year, self.month, self.day)


@dataclass(frozen=True)
class IntervalRecurrence:
    """Fixed cadence of `every_days` days."""
    every_days: int


RecurrenceRule = Union[YearlyRecurrence, IntervalRecurrence]


@dataclass(frozen=True)
class OccasionSnapshot:
    """Validated, immutable view of an occasion row."""
    id: int
    contact_id: int
    user_id: int
    name: str
    date: date
    rule: Optional[RecurrenceRule] = None

    @property
    def recurring(self) -> bool:
        return self.rule is not None


@dataclass(frozen=True)
class NextOccurrence:
    """Next occurrence of an occasion as seen from a reference date."""
    occasion: OccasionSnapshot
    status: OccurrenceStatus
    date: Optional[date] = None
    days_until: Optional[int] = None

    @property
    def is_expired(self) -> bool:
        return self.status == OccurrenceStatus.EXPIRED


def build_recurrence_rule(
    base_date: date,
    recurring: bool,
    kind: Optional[Union[RecurrenceKind, str]],
    interval: Optional[int],
    max_interval_days: int = DEFAULT_MAX_INTERVAL_DAYS,
    max_interval_years: int = DEFAULT_MAX_INTERVAL_YEARS,
) -> Optional[RecurrenceRule]:
    """
    Validate recurrence columns and build the matching rule.

    Args:
        base_date: Anchor date of the occasion
        recurring: Whether the occasion repeats
        kind: Recurrence kind; defaults to every_n_days when recurring
        interval: Years for yearly rules, days for every_n_days rules
        max_interval_days: Upper bound for day intervals
        max_interval_years: Upper bound for year intervals

    Returns:
        The recurrence rule, or None for a one-off occasion

    Raises:
        ValidationException: If a recurring occasion has no usable interval
    """
    if not recurring:
        return None

    if kind is None:
        kind = RecurrenceKind.EVERY_N_DAYS
    try:
        kind = RecurrenceKind(kind)
    except ValueError:
        raise ValidationException(
            f"Unknown recurrence kind: {kind}",
            {"field": "recurrence_kind", "value": kind},
        )

    if interval is None or isinstance(interval, bool) or not isinstance(interval, int):
        raise ValidationException(
            "Recurring occasions require an integer recurring_interval",
            {"field": "recurring_interval", "value": interval},
        )
    if interval <= 0:
        raise ValidationException(
            f"recurring_interval must be positive, got {interval}",
            {"field": "recurring_interval", "value": interval},
        )

    if kind == RecurrenceKind.YEARLY:
        if interval > max_interval_years:
            raise ValidationException(
                f"recurring_interval exceeds {max_interval_years} years",
                {"field": "recurring_interval", "value": interval},
            )
        return YearlyRecurrence(month=base_date.month, day=base_date.day, every_years=interval)

    if interval > max_interval_days:
        raise ValidationException(
            f"recurring_interval exceeds {max_interval_days} days",
            {"field": "recurring_interval", "value": interval},
        )
    return IntervalRecurrence(every_days=interval)


def _first_cycle(occasion: OccasionSnapshot, today: date) -> int:
    """Index of the first cycle whose occurrence is on or after `today`."""
    rule = occasion.rule
    base = occasion.date

    if isinstance(rule, IntervalRecurrence):
        elapsed = (today - base).days
        if elapsed <= 0:
            return 0
        return -(-elapsed // rule.every_days)

    # Yearly: the cycle landing in or just before today's year, bumped once
    # if that occurrence already passed.
    cycle = max(0, (today.year - base.year) // rule.every_years)
    if _occurrence_at(occasion, cycle) < today:
        cycle += 1
    return cycle


def _occurrence_at(occasion: OccasionSnapshot, cycle: int) -> date:
    rule = occasion.rule
    if isinstance(rule, IntervalRecurrence):
        return occasion.date + timedelta(days=cycle * rule.every_days)
    return rule.on_year(occasion.date.year + cycle * rule.every_years)


class OccurrenceSequence:
    """
    Lazy, restartable sequence of occurrence dates on or after `today`.

    Each call to iter() starts again from the first qualifying occurrence,
    so the same sequence can be walked any number of times. With `until`
    set, iteration stops at the first occurrence past that date.
    """

    def __init__(self, occasion: OccasionSnapshot, today: date, until: Optional[date] = None):
        self.occasion = occasion
        self.today = today
        self.until = until

    def __iter__(self) -> Iterator[date]:
        occasion = self.occasion

        if not occasion.recurring:
            if occasion.date >= self.today and (self.until is None or occasion.date <= self.until):
                yield occasion.date
            return

        cycle = None
        while True:
            try:
                if cycle is None:
                    cycle = _first_cycle(occasion, self.today)
                current = _occurrence_at(occasion, cycle)
            except (OverflowError, ValueError):
                # Ran past date.max; the calendar has no further occurrences.
                return
            if self.until is not None and current > self.until:
                return
            yield current
            cycle += 1

    def first(self) -> Optional[date]:
        return next(iter(self), None)


def next_occurrence(occasion: OccasionSnapshot, today: date) -> NextOccurrence:
    """
    Smallest occurrence date on or after `today`.

    One-off occasions whose date is before `today` come back EXPIRED with no
    date. An occurrence on `today` itself is DUE_TODAY.
    """
    found = OccurrenceSequence(occasion, today).first()
    if found is None:
        return NextOccurrence(occasion=occasion, status=OccurrenceStatus.EXPIRED)

    days_until = (found - today).days
    status = OccurrenceStatus.DUE_TODAY if days_until == 0 else OccurrenceStatus.UPCOMING
    return NextOccurrence(occasion=occasion, status=status, date=found, days_until=days_until)


def occurrences_within(occasion: OccasionSnapshot, today: date, window_days: int) -> OccurrenceSequence:
    """Occurrences in the inclusive range [today, today + window_days]."""
    if window_days < 0:
        raise ValidationException(
            f"window_days must not be negative, got {window_days}",
            {"field": "window_days", "value": window_days},
        )
    # A window reaching past the end of the calendar stops at date.max
    if window_days > (date.max - today).days:
        until = date.max
    else:
        until = today + timedelta(days=window_days)
    return OccurrenceSequence(occasion, today, until=until)


def nearest_occurrence(occasions: Iterable[OccasionSnapshot], today: date) -> Optional[NextOccurrence]:
    """
    The soonest non-expired occurrence among a contact's occasions.

    Ties on date go to the lower occasion id.
    """
    best = None
    for occasion in occasions:
        upcoming = next_occurrence(occasion, today)
        if upcoming.is_expired:
            continue
        if best is None or (upcoming.date, occasion.id) < (best.date, best.occasion.id):
            best = upcoming
    return best
