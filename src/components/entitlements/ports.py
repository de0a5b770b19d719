"""
Entitlements component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from src.domain.entities import Subscription


class SubscriptionRepoPort(Protocol):
    """Read-only access to billing-owned subscription records."""

    def get_current_for_viewer(self, viewer_id: str) -> Subscription | None:
        """
        Return the viewer's most recent ACTIVE or PAST_DUE subscription.

        May raise on store outage; the resolver fails closed.
        """
        ...


class TimePort(Protocol):
    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
