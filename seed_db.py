import os
import sys
from datetime import UTC, datetime, timedelta

# Add root to pythonpath
sys.path.append(os.getcwd())

from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite.repos import (
    SQLiteContentRepo,
    SQLiteReadingRepo,
    SQLiteSubscriptionRepo,
)
from src.domain.entities import ContentItem, ReadingEvent, Subscription, ZoneRequirement


def seed(db_path: str, migrations_dir: str = "migrations") -> None:
    """Create the schema and a small demo catalogue with one subscriber."""
    SQLiteMigrator(db_path, migrations_dir).run_migrations()

    content = SQLiteContentRepo(db_path)
    subs = SQLiteSubscriptionRepo(db_path)
    reads = SQLiteReadingRepo(db_path)
    now = datetime.now(UTC)

    items = [
        ContentItem(
            id="free-warmup",
            slug="ten-minute-warmup",
            title="The Ten Minute Warm-up",
            excerpt="A warm-up every squad can run before training.",
            body="<p>Start with light jogging, then dynamic stretches.</p>",
            category="training",
            read_time_minutes=4,
            view_count=120,
            zone_requirements=[ZoneRequirement(zone="read", requires_subscription=False)],
        ),
        ContentItem(
            id="coach-pressing",
            slug="pressing-triggers",
            title="Pressing Triggers for Youth Teams",
            excerpt="When to press and when to hold shape.",
            body="<p>Pressing starts with the first touch of the opponent...</p>" * 20,
            category="tactics",
            read_time_minutes=12,
            view_count=340,
            is_premium=True,
            release_date=now + timedelta(days=30),
            zone_requirements=[ZoneRequirement(zone="coach")],
        ),
        ContentItem(
            id="player-finishing",
            slug="finishing-drills",
            title="Finishing Drills You Can Do Alone",
            excerpt="Six drills that need a ball and a wall.",
            body="<p>Place the ball at the edge of the box...</p>" * 20,
            category="training",
            read_time_minutes=8,
            view_count=510,
            is_premium=True,
            zone_requirements=[ZoneRequirement(zone="player")],
        ),
        ContentItem(
            id="parent-nutrition",
            slug="match-day-nutrition",
            title="Match Day Nutrition for Young Players",
            excerpt="What to eat and when.",
            body="<p>Three hours before kick-off...</p>" * 20,
            category="health",
            read_time_minutes=6,
            view_count=95,
            is_premium=True,
            preview_length=150,
            zone_requirements=[ZoneRequirement(zone="parent")],
        ),
    ]
    for item in items:
        content.save(item)

    subs.save(
        Subscription(
            id="demo-sub",
            viewer_id="demo-coach",
            plan_id="coach_monthly",
            status="ACTIVE",
            current_period_start=now - timedelta(days=3),
            current_period_end=now + timedelta(days=27),
        )
    )
    reads.record(ReadingEvent(viewer_id="demo-player", content_id="free-warmup", read_at=now))

    print(f"Seeded {len(items)} content items and 1 subscription into {db_path}")


if __name__ == "__main__":
    data_dir = os.environ.get("PRG_DATA_DIR", "./data")
    os.makedirs(data_dir, exist_ok=True)
    seed(f"{data_dir}/premium.db")
