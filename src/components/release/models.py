"""
Release component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from src.domain.entities import ContentItem

# --- Validation Error ---


@dataclass(frozen=True)
class ReleaseValidationError:
    """Release validation error."""

    code: str
    message: str
    item_id: str | None = None


# --- Configuration ---


@dataclass(frozen=True)
class ReleaseConfig:
    """Release configuration from rules."""

    batch_max_items: int = 100
    sweep_batch_limit: int = 500
    scheduled_list_max: int = 100
    scheduled_list_default: int = 20


# --- Input Models ---


@dataclass(frozen=True)
class ScheduleReleaseInput:
    """Input for scheduling one premium item's release."""

    content_id: str
    release_date: datetime


@dataclass(frozen=True)
class ScheduleBatchInput:
    """Input for scheduling many items for the same release date."""

    content_ids: tuple[str, ...]
    release_date: datetime


@dataclass(frozen=True)
class ProcessReleasesInput:
    """Input for a release sweep."""

    max_items: int | None = None


@dataclass(frozen=True)
class ScheduledContentInput:
    """Input for listing upcoming releases."""

    # None: use the configured default
    limit: int | None = None


@dataclass(frozen=True)
class ReleaseStatsInput:
    """Input for release reporting counts."""


# --- Output Models ---


@dataclass(frozen=True)
class ScheduleOutput:
    """Output for a single schedule operation."""

    item: ContentItem | None
    errors: list[ReleaseValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class BatchScheduleOutput:
    """Output for a batch schedule operation."""

    successful: int
    failed: tuple[str, ...] = ()
    item_errors: list[ReleaseValidationError] = field(default_factory=list)
    errors: list[ReleaseValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class SweepItemError:
    """A content item that could not be released during a sweep."""

    item_id: str
    error: str


@dataclass(frozen=True)
class SweepOutput:
    """Output for a release sweep."""

    released_count: int
    released_ids: tuple[str, ...] = ()
    errors: tuple[SweepItemError, ...] = ()
    success: bool = True


@dataclass(frozen=True)
class ScheduledEntry:
    """An upcoming release for reporting."""

    item: ContentItem
    release_date: datetime
    days_until_release: int


@dataclass(frozen=True)
class ScheduledContentOutput:
    """Output for listing upcoming releases."""

    entries: tuple[ScheduledEntry, ...]
    errors: list[ReleaseValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class ReleaseStats:
    """Counts of premium items by release situation."""

    premium_count: int
    scheduled_count: int
    due_count: int
