"""
ReleaseService - Scheduled release of premium content to the free tier.

Key behaviors:
- Release dates must be strictly in the future when accepted (never clamped)
- Re-scheduling before the date simply overwrites the previous date
- Only premium items can be scheduled
- The sweep flips due items premium -> free, one conditional update each
- Flipping an already-free item is a no-op, so sweeps can overlap or repeat
- One item's failure never blocks the rest of a batch or sweep
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

from src.domain.entities import ContentItem, as_utc

from .models import (
    ReleaseConfig,
    ReleaseStats,
    ReleaseValidationError,
    ScheduledEntry,
    SweepItemError,
)
from .ports import ReleaseRepoPort, TimePort

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = ReleaseConfig()


def days_until(release_date: datetime, now_utc: datetime) -> int:
    """Whole days until release, rounded up."""
    return math.ceil((release_date - now_utc) / timedelta(days=1))


class ReleaseService:
    """
    Release scheduler and processor.

    The only writer of is_premium / release_date.
    """

    def __init__(
        self,
        repo: ReleaseRepoPort,
        time_port: TimePort | None = None,
        config: ReleaseConfig | None = None,
    ) -> None:
        self._repo = repo
        self._time = time_port
        self._config = config or DEFAULT_CONFIG

    def _now_utc(self) -> datetime:
        if self._time:
            return self._time.now_utc()
        return datetime.now(UTC)

    # --- Validation ---

    def _validate_release_date(
        self, release_date: datetime, now: datetime
    ) -> ReleaseValidationError | None:
        if as_utc(release_date) <= now:
            return ReleaseValidationError(
                code="release_date_past",
                message="Release date must be in the future",
            )
        return None

    # --- Scheduling ---

    def _schedule_one(
        self,
        content_id: str,
        release_date: datetime,
        now: datetime,
    ) -> tuple[ContentItem | None, list[ReleaseValidationError]]:
        item = self._repo.get_by_id(content_id)
        if item is None:
            return None, [
                ReleaseValidationError(
                    code="content_not_found",
                    message=f"Content {content_id} not found",
                    item_id=content_id,
                )
            ]

        not_premium = ReleaseValidationError(
            code="not_premium",
            message=f"Content {content_id} is not premium; nothing to schedule",
            item_id=content_id,
        )
        if not item.is_premium:
            return None, [not_premium]

        # Conditional write; loses to a concurrent release of the same row
        if not self._repo.set_release_date(content_id, release_date, now):
            return None, [not_premium]

        logger.info("Release of %s scheduled for %s", content_id, release_date.isoformat())
        return item.model_copy(update={"release_date": release_date, "updated_at": now}), []

    def schedule(
        self,
        content_id: str,
        release_date: datetime,
    ) -> tuple[ContentItem | None, list[ReleaseValidationError]]:
        """
        Schedule a premium item's release.

        Args:
            content_id: Item to release
            release_date: When the item becomes free (UTC)

        Returns:
            Tuple of (updated item, errors). Item is None if errors.
        """
        now = self._now_utc()
        release_date = as_utc(release_date)

        error = self._validate_release_date(release_date, now)
        if error:
            return None, [error]

        return self._schedule_one(content_id, release_date, now)

    def schedule_many(
        self,
        content_ids: Sequence[str],
        release_date: datetime,
    ) -> tuple[int, list[str], list[ReleaseValidationError], list[ReleaseValidationError]]:
        """
        Schedule many items for the same release date.

        Request-level problems (size, date) reject the whole batch.
        Per-item problems are collected and do not stop the others.

        Returns:
            Tuple of (successful count, failed ids, per-item errors, request errors)
        """
        now = self._now_utc()
        release_date = as_utc(release_date)

        if not content_ids or len(content_ids) > self._config.batch_max_items:
            return 0, [], [], [
                ReleaseValidationError(
                    code="batch_size_invalid",
                    message=(
                        f"Between 1 and {self._config.batch_max_items} "
                        "items can be scheduled at once"
                    ),
                )
            ]

        error = self._validate_release_date(release_date, now)
        if error:
            return 0, [], [], [error]

        successful = 0
        failed: list[str] = []
        item_errors: list[ReleaseValidationError] = []

        for content_id in content_ids:
            try:
                _, errors = self._schedule_one(content_id, release_date, now)
            except Exception as e:
                logger.error("Failed to schedule release of %s", content_id, exc_info=True)
                errors = [
                    ReleaseValidationError(
                        code="schedule_failed",
                        message=str(e),
                        item_id=content_id,
                    )
                ]

            if errors:
                failed.append(content_id)
                item_errors.extend(errors)
            else:
                successful += 1

        return successful, failed, item_errors, []

    # --- Processing ---

    def process_due_releases(
        self,
        max_items: int | None = None,
    ) -> tuple[list[str], list[SweepItemError]]:
        """
        Release every premium item whose release date has passed.

        Safe to run concurrently or repeatedly: an item already freed by
        another sweep is skipped without being counted or reported.

        Returns:
            Tuple of (released ids, per-item errors)
        """
        now = self._now_utc()
        limit = max_items or self._config.sweep_batch_limit

        due = self._repo.list_due_releases(now, limit=limit)
        logger.info("Processing %d due content releases", len(due))

        released: list[str] = []
        errors: list[SweepItemError] = []

        for item in due:
            try:
                if self._repo.release_if_due(item.id, now):
                    released.append(item.id)
                    logger.info("Released %s (%s) to free tier", item.id, item.title)
            except Exception as e:
                logger.error("Failed to release %s", item.id, exc_info=True)
                errors.append(SweepItemError(item_id=item.id, error=str(e)))

        return released, errors

    # --- Query Methods ---

    def get_scheduled(
        self,
        limit: int | None = None,
    ) -> tuple[list[ScheduledEntry], list[ReleaseValidationError]]:
        """List upcoming releases, soonest first."""
        if limit is None:
            limit = self._config.scheduled_list_default
        if limit < 1 or limit > self._config.scheduled_list_max:
            return [], [
                ReleaseValidationError(
                    code="limit_invalid",
                    message=f"Limit must be a number between 1 and {self._config.scheduled_list_max}",
                )
            ]

        now = self._now_utc()
        entries = [
            ScheduledEntry(
                item=item,
                release_date=item.release_date,
                days_until_release=days_until(item.release_date, now),
            )
            for item in self._repo.list_scheduled(now, limit=limit)
            if item.release_date is not None
        ]
        return entries, []

    def get_stats(self) -> ReleaseStats:
        now = self._now_utc()
        return ReleaseStats(
            premium_count=self._repo.count_premium(),
            scheduled_count=self._repo.count_scheduled(now),
            due_count=self._repo.count_due(now),
        )


# --- Factory ---


def create_release_service(
    repo: ReleaseRepoPort,
    time_port: TimePort | None = None,
    config: ReleaseConfig | None = None,
) -> ReleaseService:
    """Create a ReleaseService."""
    return ReleaseService(repo=repo, time_port=time_port, config=config)
