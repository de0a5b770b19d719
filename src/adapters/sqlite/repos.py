import sqlite3
from datetime import UTC, datetime
from typing import Any

from src.domain.entities import (
    ContentCategory,
    ContentItem,
    ReadingEvent,
    Subscription,
    ZoneId,
    ZoneRequirement,
)


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def to_db_ts(dt: datetime) -> str:
    """Fixed-width UTC ISO string so text comparison matches time order."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat(timespec="microseconds")


def parse_dt(s: str | None) -> datetime | None:
    return datetime.fromisoformat(s) if s else None


class _SQLiteRepo:
    def __init__(self, db_path: str, timeout: float = 5.0):
        self.db_path = db_path
        self.timeout = timeout

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=self.timeout)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn


class SQLiteContentRepo(_SQLiteRepo):
    """
    Content storage.

    The premium gate columns (is_premium, release_date) are written by
    set_release_date and release_if_due only; save() is the editorial path
    used by seeding and tests.
    """

    def save(self, item: ContentItem) -> ContentItem:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO content_items (
                    id, slug, title, excerpt, body, category,
                    read_time_minutes, view_count, is_premium, release_date,
                    preview_length, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    slug=excluded.slug,
                    title=excluded.title,
                    excerpt=excluded.excerpt,
                    body=excluded.body,
                    category=excluded.category,
                    read_time_minutes=excluded.read_time_minutes,
                    view_count=excluded.view_count,
                    is_premium=excluded.is_premium,
                    release_date=excluded.release_date,
                    preview_length=excluded.preview_length,
                    updated_at=excluded.updated_at
            """,
                (
                    item.id,
                    item.slug,
                    item.title,
                    item.excerpt,
                    item.body,
                    item.category,
                    item.read_time_minutes,
                    item.view_count,
                    1 if item.is_premium else 0,
                    to_db_ts(item.release_date) if item.release_date else None,
                    item.preview_length,
                    to_db_ts(item.created_at),
                    to_db_ts(item.updated_at),
                ),
            )

            conn.execute("DELETE FROM content_zones WHERE content_id = ?", (item.id,))
            for req in item.zone_requirements:
                conn.execute(
                    """
                    INSERT INTO content_zones (content_id, zone, requires_subscription)
                    VALUES (?, ?, ?)
                """,
                    (item.id, req.zone, 1 if req.requires_subscription else 0),
                )

            conn.commit()
            return item
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def get_by_id(self, content_id: str) -> ContentItem | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM content_items WHERE id = ?", (content_id,)
            ).fetchone()
            if not row:
                return None
            return self._map_row(conn, row)
        finally:
            conn.close()

    def list_premium(
        self,
        category: ContentCategory | None = None,
        limit: int = 100,
    ) -> list[ContentItem]:
        conn = self._get_conn()
        try:
            if category:
                rows = conn.execute(
                    """
                    SELECT * FROM content_items
                    WHERE is_premium = 1 AND category = ?
                    ORDER BY view_count DESC, created_at DESC
                    LIMIT ?
                """,
                    (category, limit),
                ).fetchall()
            else:
                rows = conn.execute(
                    """
                    SELECT * FROM content_items
                    WHERE is_premium = 1
                    ORDER BY view_count DESC, created_at DESC
                    LIMIT ?
                """,
                    (limit,),
                ).fetchall()
            return [self._map_row(conn, r) for r in rows]
        finally:
            conn.close()

    # --- Premium gate writes ---

    def set_release_date(self, content_id: str, release_date: datetime, now_utc: datetime) -> bool:
        conn = self._get_conn()
        try:
            cursor = conn.execute(
                """
                UPDATE content_items
                SET release_date = ?, updated_at = ?
                WHERE id = ? AND is_premium = 1
            """,
                (to_db_ts(release_date), to_db_ts(now_utc), content_id),
            )
            conn.commit()
            return cursor.rowcount == 1
        finally:
            conn.close()

    def release_if_due(self, content_id: str, now_utc: datetime) -> bool:
        conn = self._get_conn()
        try:
            now_iso = to_db_ts(now_utc)
            cursor = conn.execute(
                """
                UPDATE content_items
                SET is_premium = 0, release_date = NULL, updated_at = ?
                WHERE id = ? AND is_premium = 1
                AND release_date IS NOT NULL AND release_date <= ?
            """,
                (now_iso, content_id, now_iso),
            )
            conn.commit()
            return cursor.rowcount == 1
        finally:
            conn.close()

    # --- Release queries ---

    def list_due_releases(self, now_utc: datetime, limit: int = 500) -> list[ContentItem]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                """
                SELECT * FROM content_items
                WHERE is_premium = 1 AND release_date IS NOT NULL AND release_date <= ?
                ORDER BY release_date ASC
                LIMIT ?
            """,
                (to_db_ts(now_utc), limit),
            ).fetchall()
            return [self._map_row(conn, r) for r in rows]
        finally:
            conn.close()

    def list_scheduled(self, now_utc: datetime, limit: int = 20) -> list[ContentItem]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                """
                SELECT * FROM content_items
                WHERE is_premium = 1 AND release_date > ?
                ORDER BY release_date ASC
                LIMIT ?
            """,
                (to_db_ts(now_utc), limit),
            ).fetchall()
            return [self._map_row(conn, r) for r in rows]
        finally:
            conn.close()

    def count_premium(self) -> int:
        return self._count("SELECT COUNT(*) AS n FROM content_items WHERE is_premium = 1", ())

    def count_scheduled(self, now_utc: datetime) -> int:
        return self._count(
            "SELECT COUNT(*) AS n FROM content_items WHERE is_premium = 1 AND release_date > ?",
            (to_db_ts(now_utc),),
        )

    def count_due(self, now_utc: datetime) -> int:
        return self._count(
            "SELECT COUNT(*) AS n FROM content_items WHERE is_premium = 1 AND release_date <= ?",
            (to_db_ts(now_utc),),
        )

    def _count(self, query: str, params: tuple[Any, ...]) -> int:
        conn = self._get_conn()
        try:
            row = conn.execute(query, params).fetchone()
            return int(row["n"]) if row else 0
        finally:
            conn.close()

    def _map_row(self, conn: sqlite3.Connection, row: dict[str, Any]) -> ContentItem:
        zone_rows = conn.execute(
            "SELECT zone, requires_subscription FROM content_zones WHERE content_id = ? ORDER BY zone",
            (row["id"],),
        ).fetchall()

        return ContentItem(
            id=row["id"],
            slug=row["slug"],
            title=row["title"],
            excerpt=row["excerpt"],
            body=row["body"],
            category=row["category"],
            read_time_minutes=row["read_time_minutes"],
            view_count=row["view_count"],
            is_premium=bool(row["is_premium"]),
            release_date=parse_dt(row["release_date"]),
            preview_length=row["preview_length"],
            zone_requirements=[
                ZoneRequirement(zone=z["zone"], requires_subscription=bool(z["requires_subscription"]))
                for z in zone_rows
            ],
            created_at=parse_dt(row["created_at"]) or datetime.min.replace(tzinfo=UTC),
            updated_at=parse_dt(row["updated_at"]) or datetime.min.replace(tzinfo=UTC),
        )


class SQLiteSubscriptionRepo(_SQLiteRepo):
    """
    Billing-owned subscription records.

    Read-only for the access engine; save() exists for billing sync and seeding.
    """

    def get_current_for_viewer(self, viewer_id: str) -> Subscription | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                """
                SELECT * FROM subscriptions
                WHERE viewer_id = ? AND status IN ('ACTIVE', 'PAST_DUE')
                ORDER BY current_period_end DESC
                LIMIT 1
            """,
                (viewer_id,),
            ).fetchone()
            if not row:
                return None
            return self._map_row(row)
        finally:
            conn.close()

    def save(self, subscription: Subscription) -> Subscription:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO subscriptions (
                    id, viewer_id, plan_id, status,
                    current_period_start, current_period_end, cancel_at_period_end
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    plan_id=excluded.plan_id,
                    status=excluded.status,
                    current_period_start=excluded.current_period_start,
                    current_period_end=excluded.current_period_end,
                    cancel_at_period_end=excluded.cancel_at_period_end
            """,
                (
                    subscription.id,
                    subscription.viewer_id,
                    subscription.plan_id,
                    subscription.status,
                    to_db_ts(subscription.current_period_start),
                    to_db_ts(subscription.current_period_end),
                    1 if subscription.cancel_at_period_end else 0,
                ),
            )
            conn.commit()
            return subscription
        finally:
            conn.close()

    def _map_row(self, row: dict[str, Any]) -> Subscription:
        return Subscription(
            id=row["id"],
            viewer_id=row["viewer_id"],
            plan_id=row["plan_id"],
            status=row["status"],
            current_period_start=datetime.fromisoformat(row["current_period_start"]),
            current_period_end=datetime.fromisoformat(row["current_period_end"]),
            cancel_at_period_end=bool(row["cancel_at_period_end"]),
        )


class SQLiteReadingRepo(_SQLiteRepo):
    """Reading history, used for zone interest."""

    def record(self, event: ReadingEvent) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                "INSERT INTO reading_events (viewer_id, content_id, read_at) VALUES (?, ?, ?)",
                (event.viewer_id, event.content_id, to_db_ts(event.read_at)),
            )
            conn.commit()
        finally:
            conn.close()

    def recent_zones(self, viewer_id: str, window: int = 20) -> list[ZoneId]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                """
                SELECT z.zone AS zone
                FROM (
                    SELECT content_id FROM reading_events
                    WHERE viewer_id = ?
                    ORDER BY read_at DESC
                    LIMIT ?
                ) AS recent
                JOIN content_zones z ON z.content_id = recent.content_id
            """,
                (viewer_id, window),
            ).fetchall()
            return [r["zone"] for r in rows]
        finally:
            conn.close()
