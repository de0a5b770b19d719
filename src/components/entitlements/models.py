"""
Entitlements component models.

Subscription lookup results and resolver configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from src.domain.entities import Subscription

# --- Lookup Source ---

LookupSource = Literal["anonymous", "cache", "store", "failed_closed"]


# --- Lookup Result ---


@dataclass(frozen=True)
class ResolveOutput:
    """
    Result of resolving a viewer's subscription.

    subscription is None for anonymous viewers, viewers without a record,
    and lookups that failed (fail closed).
    """

    subscription: Subscription | None
    source: LookupSource
    viewer_id: str | None = None

    @property
    def failed_closed(self) -> bool:
        return self.source == "failed_closed"


# --- Cache Entry ---


@dataclass(frozen=True)
class CacheEntry:
    subscription: Subscription | None
    expires_at: datetime


# --- Configuration ---


@dataclass(frozen=True)
class ResolverConfig:
    """Resolver cache configuration from rules."""

    cache_ttl_seconds: int = 1800
    expiring_soon_ttl_seconds: int = 300
    expiring_soon_days: int = 7
    cache_max_entries: int = 10_000
