"""
Services package.

This package contains the follow-up scheduling logic and the services that
coordinate it with the repositories:

- occasion_recurrence: next occurrence dates for one-off and recurring occasions
- interaction_recency: recency, frequency and explicit-priority signals
- priority_engine: deterministic follow-up ranking
- scheduler_service: per-user facade over the three above
- ranking_service: cached access to rankings
"""

__all__ = []
