"""
Unit tests for the access component's pure rules.

Tests:
- plan_entitles: zone intersection, ungated items, unknown plans
- evaluate_access: release boundary and inactive subscriptions
"""

from datetime import UTC, datetime, timedelta

import pytest

from src.components.access import (
    REASON_RELEASED,
    REASON_SUBSCRIPTION_REQUIRED,
    AccessConfig,
    evaluate_access,
    plan_entitles,
)
from src.domain.entities import ContentItem, Subscription, ZoneRequirement

NOW = datetime(2025, 6, 15, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def config() -> AccessConfig:
    return AccessConfig(
        plan_zones={
            "player_monthly": frozenset({"read", "player", "series"}),
            "coach_monthly": frozenset({"read", "coach", "series"}),
        }
    )


def item(*zones: str, release_date: datetime | None = None) -> ContentItem:
    return ContentItem(
        id="c",
        slug="c",
        title="C",
        is_premium=True,
        release_date=release_date,
        zone_requirements=[ZoneRequirement(zone=z) for z in zones],
    )


class TestPlanEntitles:
    def test_matching_zone(self, config: AccessConfig) -> None:
        assert plan_entitles(item("coach"), "coach_monthly", config) is True

    def test_any_gated_zone_is_enough(self, config: AccessConfig) -> None:
        assert plan_entitles(item("coach", "parent"), "coach_monthly", config) is True

    def test_other_zone(self, config: AccessConfig) -> None:
        assert plan_entitles(item("parent"), "player_monthly", config) is False

    def test_ungated_item_covered_by_any_plan(self, config: AccessConfig) -> None:
        assert plan_entitles(item(), "player_monthly", config) is True

    def test_unknown_plan(self, config: AccessConfig) -> None:
        assert plan_entitles(item("coach"), "gold", config) is False


class TestEvaluateBoundaries:
    def test_release_instant_counts_as_released(self, config: AccessConfig) -> None:
        decision = evaluate_access(item("coach", release_date=NOW), None, NOW, config)
        assert decision.has_access is True
        assert decision.reason == REASON_RELEASED

    def test_naive_now_treated_as_utc(self, config: AccessConfig) -> None:
        decision = evaluate_access(
            item("coach", release_date=NOW), None, NOW.replace(tzinfo=None), config
        )
        assert decision.has_access is True

    def test_expired_subscription_denied(self, config: AccessConfig) -> None:
        sub = Subscription(
            id="s",
            viewer_id="v",
            plan_id="coach_monthly",
            status="ACTIVE",
            current_period_start=NOW - timedelta(days=31),
            current_period_end=NOW - timedelta(seconds=1),
        )
        decision = evaluate_access(item("coach"), sub, NOW, config)
        assert decision.has_access is False
        assert decision.reason == REASON_SUBSCRIPTION_REQUIRED
        assert decision.upgrade_url == "/pricing"
