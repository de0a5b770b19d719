"""
Preview component.

Public API for content previews, upgrade recommendations and plan listings.
"""

from .component import (
    build_preview,
    get_content_preview,
    list_plans,
    load_config_from_rules,
    rank_by_interest,
    recommend_upgrades,
    to_plain_text,
    truncate_preview,
)
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

__all__ = [
    # Functions
    "build_preview",
    "get_content_preview",
    "list_plans",
    "load_config_from_rules",
    "rank_by_interest",
    "recommend_upgrades",
    "to_plain_text",
    "truncate_preview",
    # Models
    "ContentPreview",
    "PlansOutput",
    "PreviewConfig",
    "PreviewInput",
    "PreviewOutput",
    "PreviewValidationError",
    "Recommendation",
    "RecommendInput",
    "RecommendOutput",
    # Ports
    "ContentCatalogPort",
    "InterestPort",
]
