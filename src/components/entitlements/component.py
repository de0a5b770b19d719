"""
Entitlements component - Subscription resolution for viewers.

Resolves a viewer's current subscription once per request and caches the
answer per viewer for a bounded TTL.

Invariants:
- Anonymous viewers and viewers without a record resolve to no entitlement
- Store failures resolve to no entitlement (fail closed) and are never cached
- The cache is owned by the resolver instance and guarded by a lock
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from datetime import UTC, datetime, timedelta
from threading import Lock
from typing import Any

from src.domain.entities import Subscription

from .models import CacheEntry, ResolveOutput, ResolverConfig
from .ports import SubscriptionRepoPort, TimePort

logger = logging.getLogger(__name__)


class SubscriptionResolver:
    """Resolves viewer subscriptions with a per-viewer TTL cache."""

    def __init__(
        self,
        repo: SubscriptionRepoPort,
        time_port: TimePort | None = None,
        config: ResolverConfig | None = None,
    ) -> None:
        self._repo = repo
        self._time = time_port
        self._config = config or ResolverConfig()
        self._cache: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = Lock()

    def _now_utc(self) -> datetime:
        if self._time:
            return self._time.now_utc()
        return datetime.now(UTC)

    def _ttl_for(self, subscription: Subscription | None, now: datetime) -> timedelta:
        """Shorter TTL for subscriptions about to lapse."""
        if subscription is not None:
            expiring_at = now + timedelta(days=self._config.expiring_soon_days)
            if subscription.current_period_end <= expiring_at:
                return timedelta(seconds=self._config.expiring_soon_ttl_seconds)
        return timedelta(seconds=self._config.cache_ttl_seconds)

    def _cache_get(self, viewer_id: str, now: datetime) -> CacheEntry | None:
        with self._lock:
            entry = self._cache.get(viewer_id)
            if entry is None:
                return None
            if entry.expires_at <= now:
                del self._cache[viewer_id]
                return None
            return entry

    def _cache_put(self, viewer_id: str, subscription: Subscription | None, now: datetime) -> None:
        if self._config.cache_max_entries <= 0:
            return
        entry = CacheEntry(
            subscription=subscription,
            expires_at=now + self._ttl_for(subscription, now),
        )
        with self._lock:
            self._cache[viewer_id] = entry
            self._cache.move_to_end(viewer_id)
            while len(self._cache) > self._config.cache_max_entries:
                self._cache.popitem(last=False)

    def lookup(self, viewer_id: str | None) -> ResolveOutput:
        """Resolve a viewer and report where the answer came from."""
        if not viewer_id:
            return ResolveOutput(subscription=None, source="anonymous")

        now = self._now_utc()
        cached = self._cache_get(viewer_id, now)
        if cached is not None:
            return ResolveOutput(
                subscription=cached.subscription, source="cache", viewer_id=viewer_id
            )

        try:
            subscription = self._repo.get_current_for_viewer(viewer_id)
        except Exception:
            logger.warning(
                "Subscription lookup failed for viewer %s; denying paid entitlement",
                viewer_id,
                exc_info=True,
            )
            return ResolveOutput(subscription=None, source="failed_closed", viewer_id=viewer_id)

        self._cache_put(viewer_id, subscription, now)
        return ResolveOutput(subscription=subscription, source="store", viewer_id=viewer_id)

    def resolve(self, viewer_id: str | None) -> Subscription | None:
        """Return the viewer's subscription, or None for no paid entitlement."""
        return self.lookup(viewer_id).subscription

    def invalidate(self, viewer_id: str) -> None:
        with self._lock:
            self._cache.pop(viewer_id, None)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    @property
    def cached_viewers(self) -> int:
        with self._lock:
            return len(self._cache)


# --- Configuration Loader ---


def load_config_from_rules(rules: dict[str, Any]) -> ResolverConfig:
    """
    Load ResolverConfig from the subscriptions section of rules.yaml.

    Args:
        rules: Parsed rules dictionary

    Returns:
        ResolverConfig instance
    """
    subs = rules.get("subscriptions", {})
    defaults = ResolverConfig()
    return ResolverConfig(
        cache_ttl_seconds=subs.get("cache_ttl_seconds", defaults.cache_ttl_seconds),
        expiring_soon_ttl_seconds=subs.get(
            "expiring_soon_ttl_seconds", defaults.expiring_soon_ttl_seconds
        ),
        expiring_soon_days=subs.get("expiring_soon_days", defaults.expiring_soon_days),
        cache_max_entries=subs.get("cache_max_entries", defaults.cache_max_entries),
    )
