"""
Tests for the follow-up priority engine.

Tests cover:
- Rule precedence (imminent occasion > explicit priority > recency)
- Never-contacted handling and id tie-breaks
- Scores and reason tags
- Determinism and total ordering
"""

import random
import pytest
from datetime import date, datetime, timedelta
from typing import List, Optional

from conftest import interaction_snapshot, occasion_snapshot
from personal_crm.models.enums import PriorityReason
from personal_crm.services.interaction_recency import compute_recency_signals
from personal_crm.services.occasion_recurrence import nearest_occurrence
from personal_crm.services.priority_engine import (
    ContactSignals,
    ContactSnapshot,
    NEVER_CONTACTED_SCORE,
    PriorityEngine,
)


TODAY = date(2024, 6, 1)


def signals_for(
    contact_id: int,
    days_ago: Optional[List[int]] = None,
    priority: Optional[int] = None,
    occasion_in_days: Optional[int] = None,
) -> ContactSignals:
    """Signals for a contact last seen `days_ago` with an optional occasion."""
    history = []
    for n, ago in enumerate(days_ago or [], start=1):
        when = datetime.combine(TODAY - timedelta(days=ago), datetime.min.time())
        history.append(interaction_snapshot(when, interaction_id=n, contact_id=contact_id))
    if priority is not None and history:
        last = max(history, key=lambda i: (i.interaction_date, i.id))
        history.remove(last)
        history.append(interaction_snapshot(
            last.interaction_date, interaction_id=last.id, contact_id=contact_id, followup_priority=priority,
        ))

    occasions = []
    if occasion_in_days is not None:
        occasions.append(occasion_snapshot(
            TODAY + timedelta(days=occasion_in_days), occasion_id=contact_id, contact_id=contact_id,
        ))

    return ContactSignals(
        contact=ContactSnapshot(id=contact_id, user_id=1, display_name=f"Contact {contact_id}"),
        recency=compute_recency_signals(contact_id, history, TODAY),
        nearest_occasion=nearest_occurrence(occasions, TODAY),
    )


@pytest.fixture
def engine():
    return PriorityEngine(imminent_horizon_days=7)


class TestRulePrecedence:
    """Each rule strictly dominates the ones after it."""

    def test_imminent_occasion_beats_long_silence(self, engine):
        a = signals_for(1, days_ago=[1], occasion_in_days=3)
        b = signals_for(2, days_ago=[400])
        ranked = engine.rank([b, a])
        assert [e.contact.id for e in ranked] == [1, 2]
        assert ranked[0].reason == PriorityReason.IMMINENT_OCCASION

    def test_imminent_occasion_beats_no_history_daily_contact(self, engine):
        a = signals_for(2, occasion_in_days=3)
        b = signals_for(1, days_ago=list(range(0, 30)))
        assert [e.contact.id for e in engine.rank([a, b])] == [2, 1]

    def test_explicit_priority_beats_long_silence(self, engine):
        c = signals_for(3, days_ago=[1], priority=9)
        d = signals_for(4, days_ago=[730])
        ranked = engine.rank([d, c])
        assert [e.contact.id for e in ranked] == [3, 4]
        assert ranked[0].reason == PriorityReason.EXPLICIT_PRIORITY
        assert ranked[1].reason == PriorityReason.RECENCY

    def test_occasion_outside_horizon_is_ignored(self, engine):
        far = signals_for(1, days_ago=[1], occasion_in_days=8)
        silent = signals_for(2, days_ago=[50])
        ranked = engine.rank([far, silent])
        assert [e.contact.id for e in ranked] == [2, 1]
        assert ranked[1].reason == PriorityReason.RECENCY

    def test_occasion_at_horizon_is_imminent(self, engine):
        assert engine.classify(signals_for(1, occasion_in_days=7)) == PriorityReason.IMMINENT_OCCASION


class TestWithinRules:
    """Ordering inside a single rule."""

    def test_sooner_occasion_first(self, engine):
        later = signals_for(1, occasion_in_days=5)
        sooner = signals_for(2, occasion_in_days=0)
        assert [e.contact.id for e in engine.rank([later, sooner])] == [2, 1]

    def test_higher_explicit_priority_first(self, engine):
        low = signals_for(1, days_ago=[3], priority=2)
        high = signals_for(2, days_ago=[3], priority=8)
        assert [e.contact.id for e in engine.rank([low, high])] == [2, 1]

    def test_longer_silence_first(self, engine):
        recent = signals_for(1, days_ago=[5])
        quiet = signals_for(2, days_ago=[90])
        assert [e.contact.id for e in engine.rank([recent, quiet])] == [2, 1]

    def test_never_contacted_beats_any_silence(self, engine):
        ancient = signals_for(1, days_ago=[20000])
        never = signals_for(2)
        assert [e.contact.id for e in engine.rank([ancient, never])] == [2, 1]

    def test_full_tie_broken_by_lowest_id(self, engine):
        ranked = engine.rank([signals_for(9, days_ago=[10]), signals_for(4, days_ago=[10])])
        assert [e.contact.id for e in ranked] == [4, 9]


class TestScores:
    """Display scores follow the rule that placed the contact."""

    def test_imminent_score_grows_as_occasion_nears(self, engine):
        assert engine.evaluate(signals_for(1, occasion_in_days=0)).score > engine.evaluate(
            signals_for(2, occasion_in_days=6)
        ).score

    def test_never_contacted_score(self, engine):
        assert engine.evaluate(signals_for(1)).score == float(NEVER_CONTACTED_SCORE)

    def test_recency_score_is_days_of_silence(self, engine):
        assert engine.evaluate(signals_for(1, days_ago=[42])).score == 42.0

    def test_scores_descend_across_tiers(self, engine):
        ranked = engine.rank([
            signals_for(1, days_ago=[10]),
            signals_for(2, days_ago=[1], priority=1),
            signals_for(3, occasion_in_days=2),
            signals_for(4),
        ])
        scores = [e.score for e in ranked]
        assert scores == sorted(scores, reverse=True)


class TestDeterminism:
    """Identical input always yields the identical ranking."""

    def test_input_order_does_not_matter(self, engine):
        population = [
            signals_for(n, days_ago=[n % 7 * 10] if n % 3 else None,
                        priority=(n % 4) if n % 5 == 0 else None,
                        occasion_in_days=n % 11 if n % 6 == 0 else None)
            for n in range(1, 60)
        ]
        expected = [e.contact.id for e in engine.rank(population)]

        rng = random.Random(1234)
        for _ in range(5):
            shuffled = population[:]
            rng.shuffle(shuffled)
            assert [e.contact.id for e in engine.rank(shuffled)] == expected

    def test_rank_keys_are_distinct(self, engine):
        population = [signals_for(n, days_ago=[10]) for n in range(1, 20)]
        keys = [engine.rank_key(s) for s in population]
        assert len(set(keys)) == len(keys)

    def test_duplicate_contact_rejected(self, engine):
        with pytest.raises(ValueError):
            engine.rank([signals_for(1), signals_for(1, days_ago=[3])])

    def test_empty_input(self, engine):
        assert engine.rank([]) == []

    def test_negative_horizon_rejected(self):
        with pytest.raises(ValueError):
            PriorityEngine(imminent_horizon_days=-1)
