"""
Preview component.

Content previews and upgrade recommendations derived from access decisions.

Invariants:
- A gated item never exposes more than preview_length characters of its body
- Previews and recommendations never write content or subscriptions
"""

from __future__ import annotations

import html
import logging
import re
from collections import Counter
from datetime import UTC, datetime
from typing import Any

from src.components.access import (
    AccessConfig,
    AccessDecision,
    EntitlementPort,
    TimePort,
    evaluate_access,
    resolve_subscription,
)
from src.domain.entities import ContentItem, Plan

from .models import (
    ContentPreview,
    PlansOutput,
    PreviewConfig,
    PreviewInput,
    PreviewOutput,
    PreviewValidationError,
    Recommendation,
    RecommendInput,
    RecommendOutput,
)
from .ports import ContentCatalogPort, InterestPort

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]*>")
_WS_RE = re.compile(r"\s+")


def _now_utc(time_port: TimePort | None) -> datetime:
    if time_port:
        return time_port.now_utc()
    return datetime.now(UTC)


# --- Pure Functions ---


def to_plain_text(body: str) -> str:
    """Strip tags, unescape entities and collapse whitespace."""
    text = html.unescape(_TAG_RE.sub(" ", body))
    return _WS_RE.sub(" ", text).strip()


def truncate_preview(text: str, limit: int, ellipsis: str = "...") -> tuple[str, bool]:
    """
    Cut text to at most `limit` characters.

    Returns:
        Tuple of (preview text, was_truncated). The ellipsis is added only
        when something was cut and does not count against the limit.
    """
    if limit <= 0:
        return "", bool(text)
    if len(text) <= limit:
        return text, False
    return text[:limit] + ellipsis, True


def build_preview(
    item: ContentItem,
    decision: AccessDecision,
    config: PreviewConfig | None = None,
) -> ContentPreview:
    """
    Build what the viewer may see of an item.

    Full body when access is granted; otherwise plain text cut to the
    decision's preview budget.
    """
    config = config or PreviewConfig()

    if decision.has_access:
        content, truncated = item.body, False
    else:
        content, truncated = truncate_preview(
            to_plain_text(item.body), decision.preview_length or 0, config.ellipsis
        )

    return ContentPreview(
        id=item.id,
        title=item.title,
        excerpt=item.excerpt,
        preview_content=content,
        is_premium=item.is_premium,
        is_truncated=truncated,
        requires_subscription=item.requires_subscription,
        estimated_read_time=item.read_time_minutes,
        decision=decision,
        release_date=item.release_date if item.is_premium else None,
    )


def rank_by_interest(
    items: list[tuple[ContentItem, AccessDecision]],
    interest: Counter[str],
) -> list[Recommendation]:
    """Order gated items by zone interest overlap, then popularity."""
    recs = [
        Recommendation(
            id=item.id,
            title=item.title,
            slug=item.slug,
            excerpt=item.excerpt,
            category=item.category,
            read_time_minutes=item.read_time_minutes,
            view_count=item.view_count,
            interest_score=sum(interest[z.zone] for z in item.zone_requirements),
            decision=decision,
        )
        for item, decision in items
    ]
    recs.sort(key=lambda r: (-r.interest_score, -r.view_count))
    return recs


# --- Entry Points ---


def _storage_unavailable(item_id: str | None = None) -> PreviewValidationError:
    return PreviewValidationError(
        code="storage_unavailable",
        message="Content store unavailable",
        item_id=item_id,
    )


def get_content_preview(
    inp: PreviewInput,
    *,
    catalog: ContentCatalogPort,
    resolver: EntitlementPort,
    time_port: TimePort | None = None,
    access_config: AccessConfig | None = None,
    config: PreviewConfig | None = None,
) -> PreviewOutput:
    """
    Preview one item for a viewer.

    Returns:
        PreviewOutput with the preview, or a content_not_found or
        storage_unavailable error.
    """
    try:
        item = catalog.get_by_id(inp.content_id)
    except Exception as e:
        logger.error("Content lookup failed for %s: %s", inp.content_id, e, exc_info=True)
        return PreviewOutput(
            preview=None, errors=[_storage_unavailable(inp.content_id)], success=False
        )
    if item is None:
        return PreviewOutput(
            preview=None,
            errors=[
                PreviewValidationError(
                    code="content_not_found",
                    message=f"Content {inp.content_id} not found",
                    item_id=inp.content_id,
                )
            ],
            success=False,
        )

    subscription = resolve_subscription(resolver, inp.viewer_id)
    decision = evaluate_access(item, subscription, _now_utc(time_port), access_config)
    return PreviewOutput(preview=build_preview(item, decision, config))


def recommend_upgrades(
    inp: RecommendInput,
    *,
    catalog: ContentCatalogPort,
    interests: InterestPort,
    resolver: EntitlementPort,
    time_port: TimePort | None = None,
    access_config: AccessConfig | None = None,
    config: PreviewConfig | None = None,
) -> RecommendOutput:
    """
    Suggest gated content matching the viewer's recent zone interest.

    Items the viewer can already read are left out.
    """
    config = config or PreviewConfig()

    if inp.limit < 1 or inp.limit > config.recommendation_max:
        return RecommendOutput(
            recommendations=(),
            errors=[
                PreviewValidationError(
                    code="limit_invalid",
                    message=f"Limit must be a number between 1 and {config.recommendation_max}",
                )
            ],
            success=False,
        )

    subscription = resolve_subscription(resolver, inp.viewer_id)
    now = _now_utc(time_port)

    try:
        candidates = catalog.list_premium(inp.category, limit=config.candidate_pool)
        recent = interests.recent_zones(inp.viewer_id, config.interest_window)
    except Exception as e:
        logger.error("Recommendation lookup failed for %s: %s", inp.viewer_id, e, exc_info=True)
        return RecommendOutput(
            recommendations=(), errors=[_storage_unavailable()], success=False
        )

    gated: list[tuple[ContentItem, AccessDecision]] = []
    for item in candidates:
        decision = evaluate_access(item, subscription, now, access_config)
        if not decision.has_access:
            gated.append((item, decision))

    interest: Counter[str] = Counter(recent)
    ranked = rank_by_interest(gated, interest)
    return RecommendOutput(recommendations=tuple(ranked[: inp.limit]))


def list_plans(plans: list[Plan]) -> PlansOutput:
    """Plans ordered by price, cheapest first."""
    return PlansOutput(plans=tuple(sorted(plans, key=lambda p: p.price)))


# --- Configuration Loader ---


def load_config_from_rules(rules: dict[str, Any]) -> PreviewConfig:
    preview = rules.get("preview", {})
    defaults = PreviewConfig()
    return PreviewConfig(
        ellipsis=preview.get("ellipsis", defaults.ellipsis),
        recommendation_max=preview.get("recommendation_max", defaults.recommendation_max),
        recommendation_default=preview.get(
            "recommendation_default", defaults.recommendation_default
        ),
        interest_window=preview.get("interest_window", defaults.interest_window),
    )
