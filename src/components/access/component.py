"""
Access component - Premium access checks for one or many content items.

The single-item check and the bulk coordinator share one evaluation path:
resolve the viewer once, capture "now" once, evaluate each item.

Invariants:
- Free content is always accessible
- A reached release date grants access even if the sweep has not run yet
- Resolver failures never grant access (fail closed)
- Bulk checks isolate per-item failures and never write content
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from src.domain.entities import Subscription

from ._evaluate import evaluate_access
from .models import (
    AccessConfig,
    AccessOutput,
    AccessValidationError,
    BulkAccessInput,
    BulkAccessOutput,
    BulkItemResult,
    CheckAccessInput,
)
from .ports import ContentReaderPort, EntitlementPort, TimePort

logger = logging.getLogger(__name__)


def _now_utc(time_port: TimePort | None) -> datetime:
    if time_port:
        return time_port.now_utc()
    return datetime.now(UTC)


def resolve_subscription(
    resolver: EntitlementPort, viewer_id: str | None
) -> Subscription | None:
    """Resolve a viewer, treating any resolver error as no paid entitlement."""
    if not viewer_id:
        return None
    try:
        return resolver.resolve(viewer_id)
    except Exception:
        logger.warning(
            "Entitlement resolution failed for viewer %s; failing closed",
            viewer_id,
            exc_info=True,
        )
        return None


def _not_found(content_id: str) -> AccessValidationError:
    return AccessValidationError(
        code="content_not_found",
        message=f"Content {content_id} not found",
        item_id=content_id,
    )


def _storage_unavailable(content_id: str) -> AccessValidationError:
    return AccessValidationError(
        code="storage_unavailable",
        message="Content store unavailable",
        item_id=content_id,
    )


# --- Component Entry Points ---


def check_access(
    inp: CheckAccessInput,
    *,
    content_repo: ContentReaderPort,
    resolver: EntitlementPort,
    time_port: TimePort | None = None,
    config: AccessConfig | None = None,
) -> AccessOutput:
    """
    Check whether a viewer may see one content item in full.

    Args:
        inp: Input containing content_id and optional viewer_id.
        content_repo: Content reader port.
        resolver: Subscription resolver.
        time_port: Optional time port.
        config: Access configuration.

    Returns:
        AccessOutput with a decision, or a content_not_found or
        storage_unavailable error.
    """
    config = config or AccessConfig()

    try:
        item = content_repo.get_by_id(inp.content_id)
    except Exception as e:
        logger.error("Content lookup failed for %s: %s", inp.content_id, e, exc_info=True)
        return AccessOutput(
            decision=None, errors=[_storage_unavailable(inp.content_id)], success=False
        )
    if item is None:
        return AccessOutput(decision=None, errors=[_not_found(inp.content_id)], success=False)

    subscription = resolve_subscription(resolver, inp.viewer_id)
    decision = evaluate_access(item, subscription, _now_utc(time_port), config)
    return AccessOutput(decision=decision)


def check_access_bulk(
    inp: BulkAccessInput,
    *,
    content_repo: ContentReaderPort,
    resolver: EntitlementPort,
    time_port: TimePort | None = None,
    config: AccessConfig | None = None,
) -> BulkAccessOutput:
    """
    Check many content items for one viewer.

    The resolver is called exactly once and a single timestamp is used for
    every item, so the whole batch sees one consistent entitlement view.

    Args:
        inp: Input containing content_ids (1..bulk_max_items) and viewer_id.
        content_repo: Content reader port.
        resolver: Subscription resolver.
        time_port: Optional time port.
        config: Access configuration.

    Returns:
        BulkAccessOutput with one result per requested id, in order.
    """
    config = config or AccessConfig()
    count = len(inp.content_ids)

    if count < 1 or count > config.bulk_max_items:
        return BulkAccessOutput(
            results=(),
            errors=[
                AccessValidationError(
                    code="batch_size_invalid",
                    message=f"Between 1 and {config.bulk_max_items} items can be checked at once",
                )
            ],
            success=False,
        )

    subscription = resolve_subscription(resolver, inp.viewer_id)
    now = _now_utc(time_port)

    results: list[BulkItemResult] = []
    for content_id in inp.content_ids:
        try:
            item = content_repo.get_by_id(content_id)
            if item is None:
                results.append(BulkItemResult(item_id=content_id, error=_not_found(content_id)))
                continue
            decision = evaluate_access(item, subscription, now, config)
            results.append(BulkItemResult(item_id=content_id, decision=decision))
        except Exception as e:
            logger.error("Access evaluation failed for %s: %s", content_id, e, exc_info=True)
            results.append(
                BulkItemResult(
                    item_id=content_id,
                    error=AccessValidationError(
                        code="evaluation_failed",
                        message="Access could not be evaluated",
                        item_id=content_id,
                    ),
                )
            )

    return BulkAccessOutput(results=tuple(results))


def run(
    inp: CheckAccessInput | BulkAccessInput,
    *,
    content_repo: ContentReaderPort,
    resolver: EntitlementPort,
    time_port: TimePort | None = None,
    config: AccessConfig | None = None,
) -> AccessOutput | BulkAccessOutput:
    """
    Main entry point for the access component.

    Dispatches to the single or bulk check based on input type.
    """
    if isinstance(inp, CheckAccessInput):
        return check_access(
            inp, content_repo=content_repo, resolver=resolver, time_port=time_port, config=config
        )
    if isinstance(inp, BulkAccessInput):
        return check_access_bulk(
            inp, content_repo=content_repo, resolver=resolver, time_port=time_port, config=config
        )
    raise TypeError(f"Unknown input type: {type(inp)}")


# --- Configuration Loader ---


def load_config_from_rules(rules: dict[str, Any]) -> AccessConfig:
    """
    Load AccessConfig from rules.yaml.

    Args:
        rules: Parsed rules dictionary

    Returns:
        AccessConfig instance
    """
    access = rules.get("access", {})
    defaults = AccessConfig()
    plan_zones = {
        plan["id"]: frozenset(plan.get("zones", []))
        for plan in rules.get("plans", [])
    }
    return AccessConfig(
        default_preview_length=access.get(
            "default_preview_length", defaults.default_preview_length
        ),
        upgrade_url=access.get("upgrade_url", defaults.upgrade_url),
        bulk_max_items=access.get("bulk_max_items", defaults.bulk_max_items),
        plan_zones=plan_zones,
    )
