"""
Tests for the premium content API.

Routes run against in-memory repos and a fixed clock via dependency
overrides; viewer identity and roles come from headers.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.adapters.clock import FixedClock
from src.adapters.memory import (
    InMemoryContentRepo,
    InMemoryReadingRepo,
    InMemorySubscriptionRepo,
)
from src.api.deps import (
    get_clock,
    get_content_repo,
    get_reading_repo,
    get_resolver,
    get_rules,
)
from src.api.routes.premium import router
from src.components.entitlements import SubscriptionResolver
from src.domain.entities import ContentItem, ReadingEvent, Subscription, ZoneRequirement
from src.rules.loader import load_rules

NOW = datetime(2025, 6, 15, 12, 0, 0, tzinfo=UTC)
RULES_PATH = Path(__file__).parent.parent.parent / "rules.yaml"

VIEWER = {"X-Viewer-Id": "coach-1"}
OPERATOR = {"X-Viewer-Id": "editor-1", "X-Viewer-Roles": "editor"}


# --- Test Client Setup ---


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def content() -> InMemoryContentRepo:
    return InMemoryContentRepo(
        [
            ContentItem(id="free", slug="free", title="Free", body="<p>open</p>"),
            ContentItem(
                id="coach",
                slug="coach",
                title="Coach Only",
                body="<p>" + "x" * 1000 + "</p>",
                is_premium=True,
                view_count=10,
                zone_requirements=[ZoneRequirement(zone="coach")],
            ),
            ContentItem(
                id="player",
                slug="player",
                title="Player Only",
                body="<p>" + "y" * 1000 + "</p>",
                is_premium=True,
                view_count=20,
                release_date=datetime(2025, 9, 1, tzinfo=UTC),
                zone_requirements=[ZoneRequirement(zone="player")],
            ),
        ]
    )


@pytest.fixture
def subscriptions() -> InMemorySubscriptionRepo:
    return InMemorySubscriptionRepo(
        [
            Subscription(
                id="sub-1",
                viewer_id="coach-1",
                plan_id="coach_monthly",
                status="ACTIVE",
                current_period_start=NOW - timedelta(days=5),
                current_period_end=NOW + timedelta(days=25),
            )
        ]
    )


@pytest.fixture
def client(content, subscriptions, clock) -> TestClient:
    app = FastAPI()
    app.include_router(router, prefix="/api/premium")

    reading = InMemoryReadingRepo(content)
    reading.record(ReadingEvent(viewer_id="coach-1", content_id="player", read_at=NOW))
    resolver = SubscriptionResolver(repo=subscriptions, time_port=clock)
    rules = load_rules(RULES_PATH)

    app.dependency_overrides[get_rules] = lambda: rules
    app.dependency_overrides[get_content_repo] = lambda: content
    app.dependency_overrides[get_reading_repo] = lambda: reading
    app.dependency_overrides[get_resolver] = lambda: resolver
    app.dependency_overrides[get_clock] = lambda: clock

    return TestClient(app)


# --- Plans ---


def test_plans_sorted_by_price(client: TestClient) -> None:
    response = client.get("/api/premium/plans")
    assert response.status_code == 200
    prices = [p["price"] for p in response.json()]
    assert prices == sorted(prices)
    assert len(prices) == 4


# --- Access ---


class TestAccess:
    def test_anonymous_denied_premium(self, client: TestClient) -> None:
        response = client.get("/api/premium/content/coach/access")
        assert response.status_code == 200
        data = response.json()
        assert data["has_access"] is False
        assert data["requires_upgrade"] is True
        assert data["preview_length"] == 300
        assert data["upgrade_url"] == "/pricing"

    def test_subscriber_granted(self, client: TestClient) -> None:
        response = client.get("/api/premium/content/coach/access", headers=VIEWER)
        assert response.json()["has_access"] is True
        assert response.json()["reason"] == "active subscription"

    def test_release_date_in_reason(self, client: TestClient) -> None:
        data = client.get("/api/premium/content/player/access", headers=VIEWER).json()
        assert data["has_access"] is False
        assert "2025-09-01" in data["reason"]

    def test_unknown_item_404(self, client: TestClient) -> None:
        response = client.get("/api/premium/content/missing/access")
        assert response.status_code == 404
        assert response.json()["detail"]["errors"][0]["code"] == "content_not_found"

    def test_store_down_is_503(self, client: TestClient) -> None:
        class DownRepo(InMemoryContentRepo):
            def get_by_id(self, content_id: str) -> ContentItem | None:
                raise RuntimeError("db down")

        client.app.dependency_overrides[get_content_repo] = lambda: DownRepo()
        for path in ("/api/premium/content/coach/access", "/api/premium/content/coach/preview"):
            response = client.get(path)
            assert response.status_code == 503
            assert response.json()["detail"]["errors"][0]["code"] == "storage_unavailable"

    def test_bulk(self, client: TestClient) -> None:
        response = client.post(
            "/api/premium/content/access/bulk",
            json={"content_ids": ["free", "missing", "coach", "player"]},
            headers=VIEWER,
        )
        assert response.status_code == 200
        results = response.json()["results"]
        assert [r["content_id"] for r in results] == ["free", "missing", "coach", "player"]
        assert results[1]["error"]["code"] == "content_not_found"
        assert results[2]["decision"]["has_access"] is True
        assert results[3]["decision"]["has_access"] is False

    def test_bulk_over_limit(self, client: TestClient) -> None:
        response = client.post(
            "/api/premium/content/access/bulk",
            json={"content_ids": [f"id-{i}" for i in range(51)]},
        )
        assert response.status_code == 400
        assert response.json()["detail"]["errors"][0]["code"] == "batch_size_invalid"


# --- Preview / Subscription / Recommendations ---


class TestViewer:
    def test_preview_truncated_for_anonymous(self, client: TestClient) -> None:
        data = client.get("/api/premium/content/coach/preview").json()
        assert data["is_truncated"] is True
        assert len(data["preview_content"]) == 303
        assert data["access"]["has_access"] is False

    def test_preview_full_for_subscriber(self, client: TestClient) -> None:
        data = client.get("/api/premium/content/coach/preview", headers=VIEWER).json()
        assert data["is_truncated"] is False
        assert data["preview_content"].startswith("<p>")

    def test_subscription(self, client: TestClient) -> None:
        data = client.get("/api/premium/subscription", headers=VIEWER).json()
        assert data["has_subscription"] is True
        assert data["subscription"]["days_remaining"] == 25
        assert data["plan"]["id"] == "coach_monthly"

    def test_no_subscription(self, client: TestClient) -> None:
        data = client.get("/api/premium/subscription", headers={"X-Viewer-Id": "nobody"}).json()
        assert data == {"has_subscription": False, "subscription": None, "plan": None}

    def test_subscription_requires_viewer(self, client: TestClient) -> None:
        assert client.get("/api/premium/subscription").status_code == 401

    def test_recommendations(self, client: TestClient) -> None:
        data = client.get("/api/premium/recommendations", headers=VIEWER).json()
        assert [r["id"] for r in data] == ["player"]
        assert data[0]["interest_score"] == 1

    def test_recommendations_limit_invalid(self, client: TestClient) -> None:
        response = client.get("/api/premium/recommendations?limit=50", headers=VIEWER)
        assert response.status_code == 400


# --- Operator routes ---


class TestOperator:
    def test_schedule(self, client: TestClient, content: InMemoryContentRepo) -> None:
        response = client.post(
            "/api/premium/content/coach/schedule",
            json={"release_date": "2025-07-01T00:00:00Z"},
            headers=OPERATOR,
        )
        assert response.status_code == 200
        assert response.json()["is_premium"] is True
        assert content.get_by_id("coach").release_date == datetime(2025, 7, 1, tzinfo=UTC)

    def test_schedule_past_date(self, client: TestClient, content: InMemoryContentRepo) -> None:
        response = client.post(
            "/api/premium/content/player/schedule",
            json={"release_date": "2025-01-01T00:00:00Z"},
            headers=OPERATOR,
        )
        assert response.status_code == 400
        assert response.json()["detail"]["errors"][0]["code"] == "release_date_past"
        assert content.get_by_id("player").release_date == datetime(2025, 9, 1, tzinfo=UTC)

    def test_schedule_not_premium(self, client: TestClient) -> None:
        response = client.post(
            "/api/premium/content/free/schedule",
            json={"release_date": "2025-07-01T00:00:00Z"},
            headers=OPERATOR,
        )
        assert response.status_code == 400
        assert response.json()["detail"]["errors"][0]["code"] == "not_premium"

    def test_schedule_requires_operator(self, client: TestClient) -> None:
        response = client.post(
            "/api/premium/content/coach/schedule",
            json={"release_date": "2025-07-01T00:00:00Z"},
            headers=VIEWER,
        )
        assert response.status_code == 403

    def test_schedule_batch(self, client: TestClient) -> None:
        response = client.post(
            "/api/premium/content/schedule/batch",
            json={
                "content_ids": ["coach", "free", "missing"],
                "release_date": "2025-07-01T00:00:00Z",
            },
            headers=OPERATOR,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["successful"] == 1
        assert data["failed"] == ["free", "missing"]

    def test_scheduled_and_stats(self, client: TestClient) -> None:
        scheduled = client.get("/api/premium/scheduled", headers=OPERATOR).json()
        assert [s["content_id"] for s in scheduled] == ["player"]
        assert scheduled[0]["days_until_release"] == 78

        stats = client.get("/api/premium/stats", headers=OPERATOR).json()
        assert stats == {"premium_count": 2, "scheduled_count": 1, "due_count": 0}

    def test_scheduled_limit_invalid(self, client: TestClient) -> None:
        response = client.get("/api/premium/scheduled?limit=0", headers=OPERATOR)
        assert response.status_code == 400

    def test_process_releases(self, client: TestClient, clock: FixedClock) -> None:
        clock.set(datetime(2025, 9, 2, tzinfo=UTC))
        data = client.post("/api/premium/releases/process", headers=OPERATOR).json()
        assert data["released_count"] == 1
        assert data["released_ids"] == ["player"]

        again = client.post("/api/premium/releases/process", headers=OPERATOR).json()
        assert again["released_count"] == 0
