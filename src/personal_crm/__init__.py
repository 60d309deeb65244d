"""
Personal CRM service.

Tracks contacts, tags, interactions and recurring occasions for each user,
and schedules follow-ups by ranking contacts that need attention.
"""

__version__ = "0.1.0"
