from datetime import datetime

from pydantic import BaseModel, Field

from src.domain.entities import ContentCategory, PlanInterval, SubscriptionStatus, ZoneId


# --- Errors ---
class ErrorModel(BaseModel):
    code: str
    message: str
    item_id: str | None = None


# --- Plans ---
class PlanResponse(BaseModel):
    id: str
    name: str
    description: str
    price: float
    currency: str
    interval: PlanInterval
    features: list[str] = []
    zones: list[ZoneId] = []
    is_popular: bool = False
    trial_days: int | None = None


# --- Access ---
class AccessDecisionResponse(BaseModel):
    content_id: str
    has_access: bool
    reason: str
    requires_upgrade: bool = False
    preview_length: int | None = None
    upgrade_url: str | None = None
    release_date: datetime | None = None


class BulkAccessRequest(BaseModel):
    content_ids: list[str]


class BulkAccessItemResponse(BaseModel):
    content_id: str
    decision: AccessDecisionResponse | None = None
    error: ErrorModel | None = None


class BulkAccessResponse(BaseModel):
    results: list[BulkAccessItemResponse]


# --- Preview ---
class PreviewResponse(BaseModel):
    id: str
    title: str
    excerpt: str
    preview_content: str
    is_premium: bool
    is_truncated: bool
    requires_subscription: bool
    estimated_read_time: int
    release_date: datetime | None = None
    access: AccessDecisionResponse


# --- Subscription ---
class SubscriptionInfo(BaseModel):
    id: str
    plan_id: str
    status: SubscriptionStatus
    current_period_start: datetime
    current_period_end: datetime
    cancel_at_period_end: bool
    is_active: bool
    days_remaining: int


class SubscriptionResponse(BaseModel):
    has_subscription: bool
    subscription: SubscriptionInfo | None = None
    plan: PlanResponse | None = None


# --- Recommendations ---
class RecommendationResponse(BaseModel):
    id: str
    title: str
    slug: str
    excerpt: str
    category: ContentCategory
    read_time_minutes: int
    view_count: int
    interest_score: int
    reason: str
    release_date: datetime | None = None


# --- Release scheduling ---
class ScheduleReleaseRequest(BaseModel):
    release_date: datetime = Field(..., description="When the item becomes free (UTC)")


class ScheduleBatchRequest(BaseModel):
    content_ids: list[str]
    release_date: datetime = Field(..., description="When the items become free (UTC)")


class ScheduleResponse(BaseModel):
    content_id: str
    title: str
    is_premium: bool
    release_date: datetime | None


class BatchScheduleResponse(BaseModel):
    successful: int
    failed: list[str]
    errors: list[ErrorModel] = []


class ScheduledItemResponse(BaseModel):
    content_id: str
    title: str
    slug: str
    category: ContentCategory
    release_date: datetime
    days_until_release: int


class SweepErrorModel(BaseModel):
    item_id: str
    error: str


class SweepResponse(BaseModel):
    released_count: int
    released_ids: list[str] = []
    errors: list[SweepErrorModel] = []


class ReleaseStatsResponse(BaseModel):
    premium_count: int
    scheduled_count: int
    due_count: int
