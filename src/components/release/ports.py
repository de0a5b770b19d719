"""
Release component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from src.domain.entities import ContentItem


class ReleaseRepoPort(Protocol):
    """
    Content storage restricted to the premium gate fields.

    Both writes are single conditional updates so a schedule write and a
    concurrent sweep write on the same row cannot interleave.
    """

    def get_by_id(self, content_id: str) -> ContentItem | None:
        """Get content item by ID."""
        ...

    def set_release_date(
        self,
        content_id: str,
        release_date: datetime,
        now_utc: datetime,
    ) -> bool:
        """Set release_date on a premium item. Returns False if the item is not premium."""
        ...

    def list_due_releases(self, now_utc: datetime, limit: int = 500) -> list[ContentItem]:
        """List premium items whose release date is at or before now."""
        ...

    def release_if_due(self, content_id: str, now_utc: datetime) -> bool:
        """
        Flip a premium item to free if its release date has passed.

        Returns False when nothing changed (already free or rescheduled).
        """
        ...

    def list_scheduled(self, now_utc: datetime, limit: int = 20) -> list[ContentItem]:
        """List premium items with a future release date, soonest first."""
        ...

    def count_premium(self) -> int:
        ...

    def count_scheduled(self, now_utc: datetime) -> int:
        ...

    def count_due(self, now_utc: datetime) -> int:
        ...


class TimePort(Protocol):
    """Time port for release operations."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...


class RulesPort(Protocol):
    """Port for release rules configuration."""

    def get_batch_max_items(self) -> int:
        ...

    def get_sweep_batch_limit(self) -> int:
        ...

    def get_scheduled_list_max(self) -> int:
        ...

    def get_scheduled_list_default(self) -> int:
        ...
