"""
Release component - Scheduled release of premium content to the free tier.
"""

from ._impl import ReleaseService, create_release_service, days_until
from .component import (
    ReleaseRulesAdapter,
    run,
    run_get_scheduled,
    run_get_stats,
    run_process_due_releases,
    run_schedule,
    run_schedule_batch,
)
from .models import (
    BatchScheduleOutput,
    ProcessReleasesInput,
    ReleaseConfig,
    ReleaseStats,
    ReleaseStatsInput,
    ReleaseValidationError,
    ScheduleBatchInput,
    ScheduledContentInput,
    ScheduledContentOutput,
    ScheduledEntry,
    ScheduleOutput,
    ScheduleReleaseInput,
    SweepItemError,
    SweepOutput,
)
from .ports import ReleaseRepoPort, RulesPort, TimePort

__all__ = [
    # Entry points
    "run",
    "run_get_scheduled",
    "run_get_stats",
    "run_process_due_releases",
    "run_schedule",
    "run_schedule_batch",
    # Input models
    "ProcessReleasesInput",
    "ReleaseStatsInput",
    "ScheduleBatchInput",
    "ScheduledContentInput",
    "ScheduleReleaseInput",
    # Output models
    "BatchScheduleOutput",
    "ReleaseStats",
    "ScheduledContentOutput",
    "ScheduledEntry",
    "ScheduleOutput",
    "SweepItemError",
    "SweepOutput",
    "ReleaseValidationError",
    # Ports
    "ReleaseRepoPort",
    "RulesPort",
    "TimePort",
    # Service
    "ReleaseConfig",
    "ReleaseRulesAdapter",
    "ReleaseService",
    "create_release_service",
    "days_until",
]
