"""
In-memory repositories.

Dict-backed implementations of the content, subscription and reading ports
for tests and database-less dev runs. Each store is guarded by its own lock;
the conditional writes check and update under that lock, which gives them the
same single-row atomicity the SQLite adapters get from one UPDATE.
"""

from __future__ import annotations

import threading
from datetime import datetime

from src.domain.entities import (
    ContentCategory,
    ContentItem,
    ReadingEvent,
    Subscription,
    ZoneId,
    as_utc,
)


class InMemoryContentRepo:
    def __init__(self, items: list[ContentItem] | None = None) -> None:
        self._items: dict[str, ContentItem] = {}
        self._lock = threading.Lock()
        for item in items or []:
            self.save(item)

    def save(self, item: ContentItem) -> ContentItem:
        with self._lock:
            self._items[item.id] = item
        return item

    def get_by_id(self, content_id: str) -> ContentItem | None:
        with self._lock:
            return self._items.get(content_id)

    def list_premium(
        self,
        category: ContentCategory | None = None,
        limit: int = 100,
    ) -> list[ContentItem]:
        with self._lock:
            items = [
                i for i in self._items.values()
                if i.is_premium and (category is None or i.category == category)
            ]
        items.sort(key=lambda i: (-i.view_count, -i.created_at.timestamp()))
        return items[:limit]

    def set_release_date(self, content_id: str, release_date: datetime, now_utc: datetime) -> bool:
        with self._lock:
            item = self._items.get(content_id)
            if item is None or not item.is_premium:
                return False
            self._items[content_id] = item.model_copy(
                update={"release_date": as_utc(release_date), "updated_at": now_utc}
            )
            return True

    def release_if_due(self, content_id: str, now_utc: datetime) -> bool:
        now_utc = as_utc(now_utc)
        with self._lock:
            item = self._items.get(content_id)
            if (
                item is None
                or not item.is_premium
                or item.release_date is None
                or item.release_date > now_utc
            ):
                return False
            self._items[content_id] = item.model_copy(
                update={"is_premium": False, "release_date": None, "updated_at": now_utc}
            )
            return True

    def list_due_releases(self, now_utc: datetime, limit: int = 500) -> list[ContentItem]:
        now_utc = as_utc(now_utc)
        with self._lock:
            due = [
                i for i in self._items.values()
                if i.is_premium and i.release_date is not None and i.release_date <= now_utc
            ]
        due.sort(key=lambda i: i.release_date)  # type: ignore[arg-type, return-value]
        return due[:limit]

    def list_scheduled(self, now_utc: datetime, limit: int = 20) -> list[ContentItem]:
        now_utc = as_utc(now_utc)
        with self._lock:
            upcoming = [
                i for i in self._items.values()
                if i.is_premium and i.release_date is not None and i.release_date > now_utc
            ]
        upcoming.sort(key=lambda i: i.release_date)  # type: ignore[arg-type, return-value]
        return upcoming[:limit]

    def count_premium(self) -> int:
        with self._lock:
            return sum(1 for i in self._items.values() if i.is_premium)

    def count_scheduled(self, now_utc: datetime) -> int:
        return len(self.list_scheduled(now_utc, limit=len(self._items)))

    def count_due(self, now_utc: datetime) -> int:
        return len(self.list_due_releases(now_utc, limit=len(self._items)))


class InMemorySubscriptionRepo:
    def __init__(self, subscriptions: list[Subscription] | None = None) -> None:
        self._subs: dict[str, Subscription] = {}
        self._lock = threading.Lock()
        for sub in subscriptions or []:
            self.save(sub)

    def save(self, subscription: Subscription) -> Subscription:
        with self._lock:
            self._subs[subscription.id] = subscription
        return subscription

    def get_current_for_viewer(self, viewer_id: str) -> Subscription | None:
        with self._lock:
            candidates = [
                s for s in self._subs.values()
                if s.viewer_id == viewer_id and s.status in ("ACTIVE", "PAST_DUE")
            ]
        if not candidates:
            return None
        return max(candidates, key=lambda s: s.current_period_end)


class InMemoryReadingRepo:
    def __init__(self, content_repo: InMemoryContentRepo) -> None:
        self._content = content_repo
        self._events: list[ReadingEvent] = []
        self._lock = threading.Lock()

    def record(self, event: ReadingEvent) -> None:
        with self._lock:
            self._events.append(event)

    def recent_zones(self, viewer_id: str, window: int = 20) -> list[ZoneId]:
        with self._lock:
            events = [e for e in self._events if e.viewer_id == viewer_id]
        events.sort(key=lambda e: e.read_at, reverse=True)

        zones: list[ZoneId] = []
        for event in events[:window]:
            item = self._content.get_by_id(event.content_id)
            if item is not None:
                zones.extend(z.zone for z in item.zone_requirements)
        return zones
