import sqlite3
from datetime import UTC, datetime, timedelta

import pytest

from src.adapters.sqlite.repos import (
    SQLiteContentRepo,
    SQLiteReadingRepo,
    SQLiteSubscriptionRepo,
)
from src.components.entitlements import SubscriptionResolver
from src.domain.entities import ContentItem, ReadingEvent, Subscription, ZoneRequirement

NOW = datetime(2025, 6, 15, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def repo(db_path):
    return SQLiteContentRepo(db_path)


@pytest.fixture
def sub_repo(db_path):
    return SQLiteSubscriptionRepo(db_path)


def premium(item_id, release_date=None, **kw):
    return ContentItem(
        id=item_id,
        slug=item_id,
        title=item_id.title(),
        is_premium=True,
        release_date=release_date,
        zone_requirements=[ZoneRequirement(zone="coach")],
        **kw,
    )


def test_save_and_get_content(repo):
    item = premium(
        "tactics-1",
        NOW + timedelta(days=3),
        body="<p>Body</p>",
        category="tactics",
        preview_length=120,
    )
    repo.save(item)

    fetched = repo.get_by_id("tactics-1")
    assert fetched is not None
    assert fetched.title == "Tactics-1"
    assert fetched.is_premium is True
    assert fetched.release_date == NOW + timedelta(days=3)
    assert fetched.preview_length == 120
    assert fetched.required_zones == frozenset({"coach"})


def test_get_missing_content(repo):
    assert repo.get_by_id("nope") is None


def test_save_replaces_zones(repo):
    repo.save(premium("a"))
    repo.save(
        premium("a").model_copy(
            update={"zone_requirements": [ZoneRequirement(zone="parent", requires_subscription=False)]}
        )
    )
    fetched = repo.get_by_id("a")
    assert [(z.zone, z.requires_subscription) for z in fetched.zone_requirements] == [
        ("parent", False)
    ]


def test_set_release_date_only_on_premium(repo):
    repo.save(premium("p"))
    repo.save(ContentItem(id="f", slug="f", title="Free"))

    assert repo.set_release_date("p", NOW + timedelta(days=1), NOW) is True
    assert repo.set_release_date("f", NOW + timedelta(days=1), NOW) is False
    assert repo.set_release_date("missing", NOW + timedelta(days=1), NOW) is False
    assert repo.get_by_id("f").release_date is None


def test_release_if_due_is_conditional(repo):
    repo.save(premium("due", NOW - timedelta(seconds=1)))
    repo.save(premium("later", NOW + timedelta(days=1)))
    repo.save(premium("never"))

    assert repo.release_if_due("due", NOW) is True
    assert repo.release_if_due("due", NOW) is False  # second sweep is a no-op
    assert repo.release_if_due("later", NOW) is False
    assert repo.release_if_due("never", NOW) is False

    released = repo.get_by_id("due")
    assert released.is_premium is False
    assert released.release_date is None
    assert repo.get_by_id("later").is_premium is True


def test_due_and_scheduled_queries(repo):
    repo.save(premium("due-1", NOW - timedelta(days=2)))
    repo.save(premium("due-2", NOW - timedelta(hours=1)))
    repo.save(premium("soon", NOW + timedelta(hours=1)))
    repo.save(premium("late", NOW + timedelta(days=9)))
    repo.save(premium("locked"))

    assert [i.id for i in repo.list_due_releases(NOW)] == ["due-1", "due-2"]
    assert [i.id for i in repo.list_due_releases(NOW, limit=1)] == ["due-1"]
    assert [i.id for i in repo.list_scheduled(NOW)] == ["soon", "late"]
    assert repo.count_premium() == 5
    assert repo.count_due(NOW) == 2
    assert repo.count_scheduled(NOW) == 2


def test_timestamp_ordering_with_microseconds(repo):
    """Stored text timestamps compare in time order."""
    repo.save(premium("a", NOW + timedelta(microseconds=500)))
    assert repo.list_due_releases(NOW) == []
    assert [i.id for i in repo.list_due_releases(NOW + timedelta(seconds=1))] == ["a"]


def test_list_premium_by_views_and_category(repo):
    repo.save(premium("low", view_count=1, category="tactics"))
    repo.save(premium("high", view_count=99, category="health"))
    repo.save(ContentItem(id="free", slug="free", title="Free", view_count=1000))

    assert [i.id for i in repo.list_premium()] == ["high", "low"]
    assert [i.id for i in repo.list_premium(category="tactics")] == ["low"]


def test_subscription_current_for_viewer(sub_repo):
    sub_repo.save(
        Subscription(
            id="old",
            viewer_id="v",
            plan_id="player_monthly",
            status="ACTIVE",
            current_period_start=NOW - timedelta(days=60),
            current_period_end=NOW - timedelta(days=30),
        )
    )
    sub_repo.save(
        Subscription(
            id="new",
            viewer_id="v",
            plan_id="coach_monthly",
            status="PAST_DUE",
            current_period_start=NOW - timedelta(days=1),
            current_period_end=NOW + timedelta(days=29),
        )
    )
    sub_repo.save(
        Subscription(
            id="canceled",
            viewer_id="v",
            plan_id="premium_yearly",
            status="CANCELED",
            current_period_start=NOW,
            current_period_end=NOW + timedelta(days=365),
        )
    )

    current = sub_repo.get_current_for_viewer("v")
    assert current is not None
    assert current.id == "new"
    assert current.current_period_end == NOW + timedelta(days=29)
    assert sub_repo.get_current_for_viewer("other") is None


def test_resolver_fails_closed_on_missing_schema(tmp_path):
    """A store that cannot answer resolves to no entitlement."""
    repo = SQLiteSubscriptionRepo(str(tmp_path / "empty.db"), timeout=0.1)
    resolver = SubscriptionResolver(repo=repo)
    result = resolver.lookup("v")
    assert result.failed_closed is True
    assert result.subscription is None


def test_reading_recent_zones(db_path, repo):
    repo.save(premium("c1"))
    repo.save(
        ContentItem(
            id="p1",
            slug="p1",
            title="P1",
            zone_requirements=[
                ZoneRequirement(zone="player"),
                ZoneRequirement(zone="series", requires_subscription=False),
            ],
        )
    )
    reading = SQLiteReadingRepo(db_path)
    reading.record(ReadingEvent(viewer_id="v", content_id="c1", read_at=NOW - timedelta(days=2)))
    reading.record(ReadingEvent(viewer_id="v", content_id="p1", read_at=NOW))

    assert sorted(reading.recent_zones("v", window=1)) == ["player", "series"]
    assert sorted(reading.recent_zones("v")) == ["coach", "player", "series"]
    assert reading.recent_zones("nobody") == []


def test_reading_event_requires_known_content(db_path):
    reading = SQLiteReadingRepo(db_path)
    with pytest.raises(sqlite3.IntegrityError):
        reading.record(ReadingEvent(viewer_id="v", content_id="ghost", read_at=NOW))
