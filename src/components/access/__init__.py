"""
Access component.

Public API for premium access decisions and bulk access checks.
"""

from ._evaluate import evaluate_access, plan_entitles
from .component import (
    check_access,
    check_access_bulk,
    load_config_from_rules,
    resolve_subscription,
    run,
)
from .models import (
    REASON_FREE,
    REASON_FREE_ON,
    REASON_RELEASED,
    REASON_SUBSCRIPTION,
    REASON_SUBSCRIPTION_REQUIRED,
    AccessConfig,
    AccessDecision,
    AccessOutput,
    AccessValidationError,
    BulkAccessInput,
    BulkAccessOutput,
    BulkItemResult,
    CheckAccessInput,
)
from .ports import ContentReaderPort, EntitlementPort, TimePort

__all__ = [
    # Functions
    "check_access",
    "check_access_bulk",
    "evaluate_access",
    "load_config_from_rules",
    "plan_entitles",
    "resolve_subscription",
    "run",
    # Models
    "AccessConfig",
    "AccessDecision",
    "AccessOutput",
    "AccessValidationError",
    "BulkAccessInput",
    "BulkAccessOutput",
    "BulkItemResult",
    "CheckAccessInput",
    "REASON_FREE",
    "REASON_FREE_ON",
    "REASON_RELEASED",
    "REASON_SUBSCRIPTION",
    "REASON_SUBSCRIPTION_REQUIRED",
    # Ports
    "ContentReaderPort",
    "EntitlementPort",
    "TimePort",
]
