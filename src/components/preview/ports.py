"""
Preview component port definitions.
"""

from __future__ import annotations

from typing import Protocol

from src.domain.entities import ContentCategory, ContentItem, ZoneId


class ContentCatalogPort(Protocol):
    """Read access to content for previews and recommendations."""

    def get_by_id(self, content_id: str) -> ContentItem | None:
        ...

    def list_premium(
        self,
        category: ContentCategory | None = None,
        limit: int = 100,
    ) -> list[ContentItem]:
        """List premium items, most viewed first."""
        ...


class InterestPort(Protocol):
    """Viewer reading history, used to infer zone interest."""

    def recent_zones(self, viewer_id: str, window: int = 20) -> list[ZoneId]:
        """
        Zones of the viewer's most recently read items.

        One entry per (read item, zone); repeated zones weigh more.
        """
        ...
