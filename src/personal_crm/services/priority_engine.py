"""
Follow-up Priority Engine

Merges occasion proximity, recency and the user's explicit priority into a
single ordering of contacts, most in need of follow-up first.

Ranking rules, applied in order:
1. An occasion due within the imminent horizon beats everything else.
2. An explicit follow-up priority (higher is more urgent) beats recency.
3. Otherwise longer silence ranks higher; never contacted beats any silence.
4. Remaining ties go to the lowest contact id.

The engine is a pure function of its inputs. Ordering comes from the rank
key; `score` is a display value that only moves in one direction within a
reason tier.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from personal_crm.models.enums import PriorityReason
from personal_crm.services.interaction_recency import RecencySignals
from personal_crm.services.occasion_recurrence import NextOccurrence

logger = logging.getLogger("PRIORITY_ENGINE")

DEFAULT_IMMINENT_HORIZON_DAYS = 7

IMMINENT_SCORE_BASE = 2_000_000
EXPLICIT_SCORE_BASE = 1_500_000
EXPLICIT_SCORE_SPAN = 499_999
NEVER_CONTACTED_SCORE = 999_999
RECENCY_SCORE_CAP = 999_998


@dataclass(frozen=True)
class ContactSnapshot:
    """Validated, immutable view of a contact row."""
    id: int
    user_id: int
    display_name: str = ""


@dataclass(frozen=True)
class ContactSignals:
    """Everything the engine needs to place one contact."""
    contact: ContactSnapshot
    recency: RecencySignals
    nearest_occasion: Optional[NextOccurrence] = None


@dataclass(frozen=True)
class PriorityEntry:
    """One ranked contact with the rule that placed it."""
    contact: ContactSnapshot
    score: float
    reason: PriorityReason
    signals: ContactSignals


def _silence_key(recency: RecencySignals) -> Tuple[int, int]:
    # Never contacted sorts ahead of any finite silence, longer silence first.
    if recency.never_contacted:
        return (0, 0)
    return (1, -recency.days_since_last_interaction)


def _explicit_key(recency: RecencySignals) -> Tuple[int, int]:
    if recency.has_explicit_priority:
        return (0, -recency.explicit_priority)
    return (1, 0)


class PriorityEngine:
    """
    Ranks contacts for follow-up.

    Args:
        imminent_horizon_days: An occasion this many days out or fewer is imminent
    """

    def __init__(self, imminent_horizon_days: int = DEFAULT_IMMINENT_HORIZON_DAYS):
        if imminent_horizon_days < 0:
            raise ValueError(f"imminent_horizon_days must not be negative, got {imminent_horizon_days}")
        self.imminent_horizon_days = imminent_horizon_days

    def is_imminent(self, occurrence: Optional[NextOccurrence]) -> bool:
        return (
            occurrence is not None
            and not occurrence.is_expired
            and occurrence.days_until <= self.imminent_horizon_days
        )

    def classify(self, signals: ContactSignals) -> PriorityReason:
        if self.is_imminent(signals.nearest_occasion):
            return PriorityReason.IMMINENT_OCCASION
        if signals.recency.has_explicit_priority:
            return PriorityReason.EXPLICIT_PRIORITY
        return PriorityReason.RECENCY

    def rank_key(self, signals: ContactSignals) -> tuple:
        """Total-order sort key; lower sorts first."""
        reason = self.classify(signals)
        recency = signals.recency
        contact_id = signals.contact.id

        if reason == PriorityReason.IMMINENT_OCCASION:
            return (0, signals.nearest_occasion.days_until, _explicit_key(recency), _silence_key(recency), contact_id)
        if reason == PriorityReason.EXPLICIT_PRIORITY:
            return (1, 0, _explicit_key(recency), _silence_key(recency), contact_id)
        return (2, 0, (0, 0), _silence_key(recency), contact_id)

    def score(self, signals: ContactSignals, reason: PriorityReason) -> float:
        recency = signals.recency
        if reason == PriorityReason.IMMINENT_OCCASION:
            return float(IMMINENT_SCORE_BASE + self.imminent_horizon_days - signals.nearest_occasion.days_until)
        if reason == PriorityReason.EXPLICIT_PRIORITY:
            clamped = max(-EXPLICIT_SCORE_SPAN, min(EXPLICIT_SCORE_SPAN, recency.explicit_priority))
            return float(EXPLICIT_SCORE_BASE + clamped)
        if recency.never_contacted:
            return float(NEVER_CONTACTED_SCORE)
        return float(min(recency.days_since_last_interaction, RECENCY_SCORE_CAP))

    def evaluate(self, signals: ContactSignals) -> PriorityEntry:
        reason = self.classify(signals)
        return PriorityEntry(
            contact=signals.contact,
            score=self.score(signals, reason),
            reason=reason,
            signals=signals,
        )

    def rank(self, all_signals: Iterable[ContactSignals]) -> List[PriorityEntry]:
        """
        Order contacts from most to least in need of follow-up.

        Args:
            all_signals: Per-contact signals in any order

        Returns:
            PriorityEntry list; identical input always yields identical output
        """
        ordered = sorted(all_signals, key=self.rank_key)
        seen = set()
        for signals in ordered:
            if signals.contact.id in seen:
                raise ValueError(f"Duplicate signals for contact {signals.contact.id}")
            seen.add(signals.contact.id)

        entries = [self.evaluate(signals) for signals in ordered]
        logger.debug(f"Ranked {len(entries)} contacts")
        return entries
