"""
Release component - Scheduled release of premium content.

Handles scheduling release dates on premium items and the periodic sweep
that converts due items to free content.

State machine per item:
- premium_locked -> free when release_date <= now (sweep only)
- free is terminal for this component; re-locking is an editorial action

Invariants:
- Release dates in the past are rejected, never clamped
- Scheduling never flips is_premium
- Sweeps are idempotent and isolate per-item failures
"""

from __future__ import annotations

from typing import Any

from ._impl import ReleaseService
from .models import (
    BatchScheduleOutput,
    ProcessReleasesInput,
    ReleaseConfig,
    ReleaseStats,
    ReleaseStatsInput,
    ScheduleBatchInput,
    ScheduledContentInput,
    ScheduledContentOutput,
    ScheduleOutput,
    ScheduleReleaseInput,
    SweepOutput,
)
from .ports import ReleaseRepoPort, RulesPort, TimePort


def _build_config(rules: RulesPort | None) -> ReleaseConfig:
    """Build release config from rules port."""
    if rules is None:
        return ReleaseConfig()

    return ReleaseConfig(
        batch_max_items=rules.get_batch_max_items(),
        sweep_batch_limit=rules.get_sweep_batch_limit(),
        scheduled_list_max=rules.get_scheduled_list_max(),
        scheduled_list_default=rules.get_scheduled_list_default(),
    )


def _create_service(
    repo: ReleaseRepoPort,
    time_port: TimePort | None,
    rules: RulesPort | None,
) -> ReleaseService:
    return ReleaseService(repo=repo, time_port=time_port, config=_build_config(rules))


# --- Component Entry Points ---


def run_schedule(
    inp: ScheduleReleaseInput,
    *,
    repo: ReleaseRepoPort,
    time_port: TimePort | None = None,
    rules: RulesPort | None = None,
) -> ScheduleOutput:
    """
    Schedule a premium item's release date.

    Args:
        inp: Input containing content_id and release_date.
        repo: Release repository port.
        time_port: Optional time port.
        rules: Optional rules port for configuration.

    Returns:
        ScheduleOutput with the updated item or errors.
    """
    service = _create_service(repo, time_port, rules)
    item, errors = service.schedule(inp.content_id, inp.release_date)
    return ScheduleOutput(item=item, errors=errors, success=len(errors) == 0)


def run_schedule_batch(
    inp: ScheduleBatchInput,
    *,
    repo: ReleaseRepoPort,
    time_port: TimePort | None = None,
    rules: RulesPort | None = None,
) -> BatchScheduleOutput:
    """
    Schedule many items for one release date.

    Args:
        inp: Input containing content_ids and release_date.
        repo: Release repository port.
        time_port: Optional time port.
        rules: Optional rules port for configuration.

    Returns:
        BatchScheduleOutput with counts, failed ids and errors.
    """
    service = _create_service(repo, time_port, rules)
    successful, failed, item_errors, errors = service.schedule_many(
        inp.content_ids, inp.release_date
    )
    return BatchScheduleOutput(
        successful=successful,
        failed=tuple(failed),
        item_errors=item_errors,
        errors=errors,
        success=len(errors) == 0,
    )


def run_process_due_releases(
    inp: ProcessReleasesInput,
    *,
    repo: ReleaseRepoPort,
    time_port: TimePort | None = None,
    rules: RulesPort | None = None,
) -> SweepOutput:
    """
    Release all premium items whose release date has passed.

    Args:
        inp: Input with an optional per-run item cap.
        repo: Release repository port.
        time_port: Optional time port.
        rules: Optional rules port for configuration.

    Returns:
        SweepOutput with released count and per-item errors.
    """
    service = _create_service(repo, time_port, rules)
    released, errors = service.process_due_releases(inp.max_items)
    return SweepOutput(
        released_count=len(released),
        released_ids=tuple(released),
        errors=tuple(errors),
        success=True,
    )


def run_get_scheduled(
    inp: ScheduledContentInput,
    *,
    repo: ReleaseRepoPort,
    time_port: TimePort | None = None,
    rules: RulesPort | None = None,
) -> ScheduledContentOutput:
    """List upcoming releases, soonest first."""
    service = _create_service(repo, time_port, rules)
    entries, errors = service.get_scheduled(inp.limit)
    return ScheduledContentOutput(
        entries=tuple(entries),
        errors=errors,
        success=len(errors) == 0,
    )


def run_get_stats(
    inp: ReleaseStatsInput,
    *,
    repo: ReleaseRepoPort,
    time_port: TimePort | None = None,
    rules: RulesPort | None = None,
) -> ReleaseStats:
    """Count premium, scheduled and overdue items."""
    return _create_service(repo, time_port, rules).get_stats()


def run(
    inp: (
        ScheduleReleaseInput
        | ScheduleBatchInput
        | ProcessReleasesInput
        | ScheduledContentInput
        | ReleaseStatsInput
    ),
    *,
    repo: ReleaseRepoPort,
    time_port: TimePort | None = None,
    rules: RulesPort | None = None,
) -> ScheduleOutput | BatchScheduleOutput | SweepOutput | ScheduledContentOutput | ReleaseStats:
    """
    Main entry point for the release component.

    Dispatches to appropriate handler based on input type.
    """
    if isinstance(inp, ScheduleReleaseInput):
        return run_schedule(inp, repo=repo, time_port=time_port, rules=rules)
    elif isinstance(inp, ScheduleBatchInput):
        return run_schedule_batch(inp, repo=repo, time_port=time_port, rules=rules)
    elif isinstance(inp, ProcessReleasesInput):
        return run_process_due_releases(inp, repo=repo, time_port=time_port, rules=rules)
    elif isinstance(inp, ScheduledContentInput):
        return run_get_scheduled(inp, repo=repo, time_port=time_port, rules=rules)
    elif isinstance(inp, ReleaseStatsInput):
        return run_get_stats(inp, repo=repo, time_port=time_port, rules=rules)
    else:
        raise TypeError(f"Unknown input type: {type(inp)}")


# --- Rules Adapter ---


class ReleaseRulesAdapter:
    """Maps the release section of rules.yaml onto RulesPort."""

    def __init__(self, rules: dict[str, Any]) -> None:
        self._release = rules.get("release", {})
        self._defaults = ReleaseConfig()

    def get_batch_max_items(self) -> int:
        return int(self._release.get("batch_max_items", self._defaults.batch_max_items))

    def get_sweep_batch_limit(self) -> int:
        return int(self._release.get("sweep_batch_limit", self._defaults.sweep_batch_limit))

    def get_scheduled_list_max(self) -> int:
        return int(self._release.get("scheduled_list_max", self._defaults.scheduled_list_max))

    def get_scheduled_list_default(self) -> int:
        return int(
            self._release.get("scheduled_list_default", self._defaults.scheduled_list_default)
        )
