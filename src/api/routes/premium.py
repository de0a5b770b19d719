"""
Premium content API routes.

Viewer endpoints: plans, access checks (single and bulk), previews, the
viewer's subscription and upgrade recommendations.

Operator endpoints: scheduling release dates, listing upcoming releases,
release stats and triggering a release sweep.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from src.adapters.clock import SystemClock
from src.adapters.sqlite.repos import SQLiteContentRepo, SQLiteReadingRepo
from src.api.deps import (
    get_access_config,
    get_clock,
    get_content_repo,
    get_preview_config,
    get_reading_repo,
    get_release_rules,
    get_resolver,
    get_rules,
    get_viewer_id,
    require_operator,
    require_viewer,
)
from src.api.schemas import (
    AccessDecisionResponse,
    BatchScheduleResponse,
    BulkAccessItemResponse,
    BulkAccessRequest,
    BulkAccessResponse,
    ErrorModel,
    PlanResponse,
    PreviewResponse,
    RecommendationResponse,
    ReleaseStatsResponse,
    ScheduleBatchRequest,
    ScheduledItemResponse,
    ScheduleReleaseRequest,
    ScheduleResponse,
    SubscriptionInfo,
    SubscriptionResponse,
    SweepErrorModel,
    SweepResponse,
)
from src.components.access import (
    AccessConfig,
    AccessDecision,
    BulkAccessInput,
    CheckAccessInput,
    check_access,
    check_access_bulk,
)
from src.components.entitlements import SubscriptionResolver
from src.components.preview import (
    PreviewConfig,
    PreviewInput,
    RecommendInput,
    get_content_preview,
    list_plans,
    recommend_upgrades,
)
from src.components.release import (
    ProcessReleasesInput,
    ReleaseRulesAdapter,
    ReleaseStatsInput,
    ScheduleBatchInput,
    ScheduledContentInput,
    ScheduleReleaseInput,
    run_get_scheduled,
    run_get_stats,
    run_process_due_releases,
    run_schedule,
    run_schedule_batch,
)
from src.domain.entities import ContentCategory, Plan
from src.rules.models import Rules

router = APIRouter()


# --- Helpers ---


def _serialize_errors(errors: Sequence[Any]) -> list[dict[str, Any]]:
    """Serialize component validation errors for JSON response."""
    return [
        {
            "code": e.code,
            "message": e.message,
            "item_id": e.item_id,
        }
        for e in errors
    ]


def _raise_for_errors(errors: Sequence[Any]) -> None:
    """503 when storage failed, 404 when the requested item is unknown, 400 otherwise."""
    if not errors:
        return
    codes = {e.code for e in errors}
    if "storage_unavailable" in codes:
        status_code = 503
    elif "content_not_found" in codes:
        status_code = 404
    else:
        status_code = 400
    raise HTTPException(status_code=status_code, detail={"errors": _serialize_errors(errors)})


def decision_to_response(content_id: str, decision: AccessDecision) -> AccessDecisionResponse:
    return AccessDecisionResponse(
        content_id=content_id,
        has_access=decision.has_access,
        reason=decision.reason,
        requires_upgrade=decision.requires_upgrade,
        preview_length=decision.preview_length,
        upgrade_url=decision.upgrade_url,
        release_date=decision.release_date,
    )


def plan_to_response(plan: Plan) -> PlanResponse:
    return PlanResponse(**plan.model_dump())


# --- Viewer Routes ---


@router.get("/plans", response_model=list[PlanResponse])
def get_plans(rules: Rules = Depends(get_rules)) -> Any:
    """List subscription plans, cheapest first."""
    return [plan_to_response(p) for p in list_plans(rules.plans).plans]


@router.get("/content/{content_id}/access", response_model=AccessDecisionResponse)
def get_content_access(
    content_id: str,
    viewer_id: str | None = Depends(get_viewer_id),
    content_repo: SQLiteContentRepo = Depends(get_content_repo),
    resolver: SubscriptionResolver = Depends(get_resolver),
    clock: SystemClock = Depends(get_clock),
    config: AccessConfig = Depends(get_access_config),
) -> Any:
    """Check whether the viewer may read one item in full."""
    result = check_access(
        CheckAccessInput(content_id=content_id, viewer_id=viewer_id),
        content_repo=content_repo,
        resolver=resolver,
        time_port=clock,
        config=config,
    )
    _raise_for_errors(result.errors)
    if result.decision is None:
        raise HTTPException(status_code=500, detail="Access could not be evaluated")
    return decision_to_response(content_id, result.decision)


@router.post("/content/access/bulk", response_model=BulkAccessResponse)
def post_bulk_access(
    request: BulkAccessRequest,
    viewer_id: str | None = Depends(get_viewer_id),
    content_repo: SQLiteContentRepo = Depends(get_content_repo),
    resolver: SubscriptionResolver = Depends(get_resolver),
    clock: SystemClock = Depends(get_clock),
    config: AccessConfig = Depends(get_access_config),
) -> Any:
    """
    Check many items at once.

    Unknown ids come back as per-item errors; only an out-of-range
    batch size fails the whole request.
    """
    result = check_access_bulk(
        BulkAccessInput(content_ids=tuple(request.content_ids), viewer_id=viewer_id),
        content_repo=content_repo,
        resolver=resolver,
        time_port=clock,
        config=config,
    )
    if result.errors:
        raise HTTPException(status_code=400, detail={"errors": _serialize_errors(result.errors)})

    return BulkAccessResponse(
        results=[
            BulkAccessItemResponse(
                content_id=r.item_id,
                decision=decision_to_response(r.item_id, r.decision) if r.decision else None,
                error=ErrorModel(**_serialize_errors([r.error])[0]) if r.error else None,
            )
            for r in result.results
        ]
    )


@router.get("/content/{content_id}/preview", response_model=PreviewResponse)
def get_preview(
    content_id: str,
    viewer_id: str | None = Depends(get_viewer_id),
    content_repo: SQLiteContentRepo = Depends(get_content_repo),
    resolver: SubscriptionResolver = Depends(get_resolver),
    clock: SystemClock = Depends(get_clock),
    access_config: AccessConfig = Depends(get_access_config),
    preview_config: PreviewConfig = Depends(get_preview_config),
) -> Any:
    """Full body for entitled viewers, a truncated plain-text preview otherwise."""
    result = get_content_preview(
        PreviewInput(content_id=content_id, viewer_id=viewer_id),
        catalog=content_repo,
        resolver=resolver,
        time_port=clock,
        access_config=access_config,
        config=preview_config,
    )
    _raise_for_errors(result.errors)
    p = result.preview
    if p is None:
        raise HTTPException(status_code=500, detail="Preview could not be built")

    return PreviewResponse(
        id=p.id,
        title=p.title,
        excerpt=p.excerpt,
        preview_content=p.preview_content,
        is_premium=p.is_premium,
        is_truncated=p.is_truncated,
        requires_subscription=p.requires_subscription,
        estimated_read_time=p.estimated_read_time,
        release_date=p.release_date,
        access=decision_to_response(p.id, p.decision),
    )


@router.get("/subscription", response_model=SubscriptionResponse)
def get_subscription(
    viewer_id: str = Depends(require_viewer),
    resolver: SubscriptionResolver = Depends(get_resolver),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> Any:
    """The viewer's current subscription and its plan, if any."""
    sub = resolver.resolve(viewer_id)
    if sub is None:
        return SubscriptionResponse(has_subscription=False)

    now = clock.now_utc()
    plan = rules.plans_by_id().get(sub.plan_id)
    return SubscriptionResponse(
        has_subscription=True,
        subscription=SubscriptionInfo(
            id=sub.id,
            plan_id=sub.plan_id,
            status=sub.status,
            current_period_start=sub.current_period_start,
            current_period_end=sub.current_period_end,
            cancel_at_period_end=sub.cancel_at_period_end,
            is_active=sub.is_active(now),
            days_remaining=sub.days_remaining(now),
        ),
        plan=plan_to_response(plan) if plan else None,
    )


@router.get("/recommendations", response_model=list[RecommendationResponse])
def get_recommendations(
    limit: int | None = None,
    category: ContentCategory | None = None,
    viewer_id: str = Depends(require_viewer),
    content_repo: SQLiteContentRepo = Depends(get_content_repo),
    reading_repo: SQLiteReadingRepo = Depends(get_reading_repo),
    resolver: SubscriptionResolver = Depends(get_resolver),
    clock: SystemClock = Depends(get_clock),
    access_config: AccessConfig = Depends(get_access_config),
    preview_config: PreviewConfig = Depends(get_preview_config),
) -> Any:
    """Gated items matching the viewer's recent reading, best match first."""
    result = recommend_upgrades(
        RecommendInput(
            viewer_id=viewer_id,
            limit=limit if limit is not None else preview_config.recommendation_default,
            category=category,
        ),
        catalog=content_repo,
        interests=reading_repo,
        resolver=resolver,
        time_port=clock,
        access_config=access_config,
        config=preview_config,
    )
    _raise_for_errors(result.errors)

    return [
        RecommendationResponse(
            id=r.id,
            title=r.title,
            slug=r.slug,
            excerpt=r.excerpt,
            category=r.category,
            read_time_minutes=r.read_time_minutes,
            view_count=r.view_count,
            interest_score=r.interest_score,
            reason=r.decision.reason,
            release_date=r.decision.release_date,
        )
        for r in result.recommendations
    ]


# --- Operator Routes ---


@router.post("/content/{content_id}/schedule", response_model=ScheduleResponse)
def schedule_release(
    content_id: str,
    request: ScheduleReleaseRequest,
    operator_id: str = Depends(require_operator),
    content_repo: SQLiteContentRepo = Depends(get_content_repo),
    clock: SystemClock = Depends(get_clock),
    rules: ReleaseRulesAdapter = Depends(get_release_rules),
) -> Any:
    """Set the date a premium item becomes free. Overwrites any earlier date."""
    result = run_schedule(
        ScheduleReleaseInput(content_id=content_id, release_date=request.release_date),
        repo=content_repo,
        time_port=clock,
        rules=rules,
    )
    _raise_for_errors(result.errors)
    if result.item is None:
        raise HTTPException(status_code=500, detail="Failed to schedule release")

    return ScheduleResponse(
        content_id=result.item.id,
        title=result.item.title,
        is_premium=result.item.is_premium,
        release_date=result.item.release_date,
    )


@router.post("/content/schedule/batch", response_model=BatchScheduleResponse)
def schedule_release_batch(
    request: ScheduleBatchRequest,
    operator_id: str = Depends(require_operator),
    content_repo: SQLiteContentRepo = Depends(get_content_repo),
    clock: SystemClock = Depends(get_clock),
    rules: ReleaseRulesAdapter = Depends(get_release_rules),
) -> Any:
    """Schedule many items for the same date; per-item failures are reported."""
    result = run_schedule_batch(
        ScheduleBatchInput(
            content_ids=tuple(request.content_ids),
            release_date=request.release_date,
        ),
        repo=content_repo,
        time_port=clock,
        rules=rules,
    )
    if result.errors:
        raise HTTPException(status_code=400, detail={"errors": _serialize_errors(result.errors)})

    return BatchScheduleResponse(
        successful=result.successful,
        failed=list(result.failed),
        errors=[ErrorModel(**e) for e in _serialize_errors(result.item_errors)],
    )


@router.get("/scheduled", response_model=list[ScheduledItemResponse])
def get_scheduled(
    limit: int | None = None,
    operator_id: str = Depends(require_operator),
    content_repo: SQLiteContentRepo = Depends(get_content_repo),
    clock: SystemClock = Depends(get_clock),
    rules: ReleaseRulesAdapter = Depends(get_release_rules),
) -> Any:
    """Upcoming releases, soonest first."""
    result = run_get_scheduled(
        ScheduledContentInput(limit=limit),
        repo=content_repo,
        time_port=clock,
        rules=rules,
    )
    _raise_for_errors(result.errors)

    return [
        ScheduledItemResponse(
            content_id=e.item.id,
            title=e.item.title,
            slug=e.item.slug,
            category=e.item.category,
            release_date=e.release_date,
            days_until_release=e.days_until_release,
        )
        for e in result.entries
    ]


@router.get("/stats", response_model=ReleaseStatsResponse)
def get_stats(
    operator_id: str = Depends(require_operator),
    content_repo: SQLiteContentRepo = Depends(get_content_repo),
    clock: SystemClock = Depends(get_clock),
) -> Any:
    stats = run_get_stats(ReleaseStatsInput(), repo=content_repo, time_port=clock)
    return ReleaseStatsResponse(
        premium_count=stats.premium_count,
        scheduled_count=stats.scheduled_count,
        due_count=stats.due_count,
    )


@router.post("/releases/process", response_model=SweepResponse)
def process_releases(
    operator_id: str = Depends(require_operator),
    content_repo: SQLiteContentRepo = Depends(get_content_repo),
    clock: SystemClock = Depends(get_clock),
    rules: ReleaseRulesAdapter = Depends(get_release_rules),
) -> Any:
    """
    Run one release sweep now.

    For external schedulers and manual intervention; safe to call while
    another sweep is running.
    """
    result = run_process_due_releases(
        ProcessReleasesInput(),
        repo=content_repo,
        time_port=clock,
        rules=rules,
    )
    return SweepResponse(
        released_count=result.released_count,
        released_ids=list(result.released_ids),
        errors=[SweepErrorModel(item_id=e.item_id, error=e.error) for e in result.errors],
    )
