import math
from datetime import UTC, datetime, timedelta
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

# --- Enums / Literals ---
ZoneId = Literal["read", "player", "coach", "parent", "series"]
SubscriptionStatus = Literal["ACTIVE", "CANCELED", "PAST_DUE", "UNPAID"]
PlanInterval = Literal["month", "year"]
ContentCategory = Literal["news", "tactics", "training", "health", "psychology", "series", "other"]


def utc_now() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC; aware ones are converted."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


# --- Content ---

class ZoneRequirement(BaseModel):
    zone: ZoneId
    requires_subscription: bool = True


class ContentItem(BaseModel):
    id: str = Field(default_factory=lambda: uuid4().hex)
    slug: str
    title: str
    excerpt: str = ""
    body: str = ""
    category: ContentCategory = "other"
    read_time_minutes: int = 0
    view_count: int = 0

    # Premium gate state. Written only by the release component.
    is_premium: bool = False
    release_date: datetime | None = None
    preview_length: int | None = None

    zone_requirements: list[ZoneRequirement] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("release_date")
    @classmethod
    def _release_date_utc(cls, v: datetime | None) -> datetime | None:
        return as_utc(v) if v is not None else None

    @property
    def required_zones(self) -> frozenset[ZoneId]:
        return frozenset(z.zone for z in self.zone_requirements if z.requires_subscription)

    @property
    def requires_subscription(self) -> bool:
        return any(z.requires_subscription for z in self.zone_requirements)


# --- Billing (read-only here) ---

class Subscription(BaseModel):
    id: str = Field(default_factory=lambda: uuid4().hex)
    viewer_id: str
    plan_id: str
    status: SubscriptionStatus
    current_period_start: datetime
    current_period_end: datetime
    cancel_at_period_end: bool = False

    @field_validator("current_period_start", "current_period_end")
    @classmethod
    def _period_utc(cls, v: datetime) -> datetime:
        return as_utc(v)

    def is_active(self, now: datetime) -> bool:
        return self.status == "ACTIVE" and now <= self.current_period_end

    def days_remaining(self, now: datetime) -> int:
        remaining = self.current_period_end - now
        return max(0, math.ceil(remaining / timedelta(days=1)))


class Plan(BaseModel):
    id: str
    name: str
    description: str = ""
    price: float
    currency: str = "BGN"
    interval: PlanInterval = "month"
    features: list[str] = Field(default_factory=list)
    zones: list[ZoneId] = Field(default_factory=list)
    is_popular: bool = False
    trial_days: int | None = None


# --- Engagement (read-only here) ---

class ReadingEvent(BaseModel):
    viewer_id: str
    content_id: str
    read_at: datetime = Field(default_factory=utc_now)
