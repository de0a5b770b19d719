"""
Access component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from src.domain.entities import ContentItem, Subscription


class ContentReaderPort(Protocol):
    """Read access to content item snapshots."""

    def get_by_id(self, content_id: str) -> ContentItem | None:
        """Get content item by ID."""
        ...


class EntitlementPort(Protocol):
    """Subscription resolution for a viewer."""

    def resolve(self, viewer_id: str | None) -> Subscription | None:
        """Return the viewer's subscription, or None for no paid entitlement."""
        ...


class TimePort(Protocol):
    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
