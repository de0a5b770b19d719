"""
Access component models.

Data models for premium access decisions and bulk access checks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from src.domain.entities import ZoneId

# --- Reasons ---

REASON_FREE = "free content"
REASON_RELEASED = "released to free tier"
REASON_SUBSCRIPTION = "active subscription"
REASON_FREE_ON = "premium content - free on {date}"
REASON_SUBSCRIPTION_REQUIRED = "premium content - subscription required"


# --- Validation Error ---


@dataclass(frozen=True)
class AccessValidationError:
    """Access check validation error."""

    code: str
    message: str
    item_id: str | None = None


# --- Decision ---


@dataclass(frozen=True)
class AccessDecision:
    """
    Outcome of evaluating one content item for one viewer.

    Computed per request and never persisted.
    """

    has_access: bool
    reason: str
    requires_upgrade: bool = False
    preview_length: int | None = None  # None means full content
    upgrade_url: str | None = None
    release_date: datetime | None = None


# --- Configuration ---


@dataclass(frozen=True)
class AccessConfig:
    """Access configuration from rules."""

    default_preview_length: int = 300
    upgrade_url: str = "/pricing"
    bulk_max_items: int = 50
    # plan_id -> zones the plan entitles
    plan_zones: dict[str, frozenset[ZoneId]] = field(default_factory=dict)


# --- Input Models ---


@dataclass(frozen=True)
class CheckAccessInput:
    """Input for a single access check."""

    content_id: str
    viewer_id: str | None = None


@dataclass(frozen=True)
class BulkAccessInput:
    """Input for checking many items for one viewer."""

    content_ids: tuple[str, ...]
    viewer_id: str | None = None


# --- Output Models ---


@dataclass(frozen=True)
class AccessOutput:
    """Output for a single access check."""

    decision: AccessDecision | None
    errors: list[AccessValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class BulkItemResult:
    """One entry of a bulk check: either a decision or an error."""

    item_id: str
    decision: AccessDecision | None = None
    error: AccessValidationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class BulkAccessOutput:
    """Output for a bulk access check, in request order."""

    results: tuple[BulkItemResult, ...]
    errors: list[AccessValidationError] = field(default_factory=list)
    success: bool = True
