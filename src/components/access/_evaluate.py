"""
Access evaluation rules.

Pure function of (item, subscription, now, config). No I/O, no clock reads.

Rule order, first match wins:
1. Not premium -> allowed
2. Release date reached -> allowed, even before the release sweep runs
3. Active subscription whose plan covers the item's required zones -> allowed
4. Otherwise denied with an upgrade prompt and a preview budget
"""

from __future__ import annotations

from datetime import datetime

from src.domain.entities import ContentItem, Subscription, as_utc

from .models import (
    REASON_FREE,
    REASON_FREE_ON,
    REASON_RELEASED,
    REASON_SUBSCRIPTION,
    REASON_SUBSCRIPTION_REQUIRED,
    AccessConfig,
    AccessDecision,
)


def plan_entitles(item: ContentItem, plan_id: str, config: AccessConfig) -> bool:
    """
    Check whether a plan covers the item.

    Items with no subscription-gated zones are covered by any plan; otherwise
    the plan must entitle at least one of the gated zones. Unknown plans
    entitle nothing.
    """
    required = item.required_zones
    if not required:
        return True
    zones = config.plan_zones.get(plan_id)
    if not zones:
        return False
    return bool(required & zones)


def evaluate_access(
    item: ContentItem,
    subscription: Subscription | None,
    now: datetime,
    config: AccessConfig | None = None,
) -> AccessDecision:
    """
    Decide whether the full item may be shown.

    Args:
        item: Content item snapshot
        subscription: Resolved subscription, None for no paid entitlement
        now: Timestamp captured once by the caller
        config: Access configuration

    Returns:
        AccessDecision
    """
    config = config or AccessConfig()
    now = as_utc(now)

    if not item.is_premium:
        return AccessDecision(has_access=True, reason=REASON_FREE)

    if item.release_date is not None and now >= item.release_date:
        return AccessDecision(has_access=True, reason=REASON_RELEASED)

    if (
        subscription is not None
        and subscription.is_active(now)
        and plan_entitles(item, subscription.plan_id, config)
    ):
        return AccessDecision(has_access=True, reason=REASON_SUBSCRIPTION)

    if item.release_date is not None:
        reason = REASON_FREE_ON.format(date=item.release_date.date().isoformat())
    else:
        reason = REASON_SUBSCRIPTION_REQUIRED

    return AccessDecision(
        has_access=False,
        reason=reason,
        requires_upgrade=True,
        preview_length=item.preview_length or config.default_preview_length,
        upgrade_url=config.upgrade_url,
        release_date=item.release_date,
    )
