"""
Preview component models.

Read-only views built on top of access decisions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from src.components.access import AccessDecision
from src.domain.entities import ContentCategory, Plan

# --- Validation Error ---


@dataclass(frozen=True)
class PreviewValidationError:
    code: str
    message: str
    item_id: str | None = None


# --- Configuration ---


@dataclass(frozen=True)
class PreviewConfig:
    """Preview configuration from rules."""

    ellipsis: str = "..."
    recommendation_max: int = 20
    recommendation_default: int = 5
    interest_window: int = 20
    candidate_pool: int = 100


# --- Preview ---


@dataclass(frozen=True)
class ContentPreview:
    """
    What a viewer may see of one item.

    preview_content holds the full body when access is granted, otherwise
    at most decision.preview_length characters of plain text.
    """

    id: str
    title: str
    excerpt: str
    preview_content: str
    is_premium: bool
    is_truncated: bool
    requires_subscription: bool
    estimated_read_time: int
    decision: AccessDecision
    release_date: datetime | None = None


@dataclass(frozen=True)
class PreviewInput:
    content_id: str
    viewer_id: str | None = None


@dataclass(frozen=True)
class PreviewOutput:
    preview: ContentPreview | None
    errors: list[PreviewValidationError] = field(default_factory=list)
    success: bool = True


# --- Recommendations ---


@dataclass(frozen=True)
class Recommendation:
    """A gated item suggested to a viewer as a reason to upgrade."""

    id: str
    title: str
    slug: str
    excerpt: str
    category: str
    read_time_minutes: int
    view_count: int
    interest_score: int
    decision: AccessDecision


@dataclass(frozen=True)
class RecommendInput:
    viewer_id: str
    limit: int = 5
    category: ContentCategory | None = None


@dataclass(frozen=True)
class RecommendOutput:
    recommendations: tuple[Recommendation, ...]
    errors: list[PreviewValidationError] = field(default_factory=list)
    success: bool = True


# --- Plans ---


@dataclass(frozen=True)
class PlansOutput:
    plans: tuple[Plan, ...]
