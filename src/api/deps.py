import os
import threading
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any

from fastapi import Depends, Header, HTTPException, status

from src.adapters.clock import SystemClock
from src.adapters.sqlite.repos import (
    SQLiteContentRepo,
    SQLiteReadingRepo,
    SQLiteSubscriptionRepo,
)
from src.components import access, entitlements, preview
from src.components.access import AccessConfig
from src.components.entitlements import SubscriptionResolver
from src.components.preview import PreviewConfig
from src.components.release import ReleaseRulesAdapter
from src.rules.loader import load_rules
from src.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("PRG_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "premium.db")
        self.rules_path = Path(os.environ.get("PRG_RULES_PATH", self.base_dir / "rules.yaml"))
        self.migrations_dir = self.base_dir / "migrations"


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


def get_rules_dict(rules: Rules = Depends(get_rules)) -> dict[str, Any]:
    """Plain-dict rules, the shape component config loaders take."""
    return rules.model_dump()


# --- Repos ---
def get_content_repo(settings: Settings = Depends(get_settings)) -> SQLiteContentRepo:
    return SQLiteContentRepo(settings.db_path)


def get_reading_repo(settings: Settings = Depends(get_settings)) -> SQLiteReadingRepo:
    return SQLiteReadingRepo(settings.db_path)


# --- Time ---
_clock_instance: SystemClock | None = None


def get_clock() -> SystemClock:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


# --- Component Config ---
def get_access_config(rules: dict[str, Any] = Depends(get_rules_dict)) -> AccessConfig:
    return access.load_config_from_rules(rules)


def get_preview_config(rules: dict[str, Any] = Depends(get_rules_dict)) -> PreviewConfig:
    return preview.load_config_from_rules(rules)


def get_release_rules(rules: dict[str, Any] = Depends(get_rules_dict)) -> ReleaseRulesAdapter:
    return ReleaseRulesAdapter(rules)


# --- Subscription Resolver ---
# One resolver per process so its cache is shared across requests.
_resolver_instance: SubscriptionResolver | None = None
_resolver_lock = threading.Lock()


def get_resolver(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
    clock: SystemClock = Depends(get_clock),
) -> SubscriptionResolver:
    """Get subscription resolver singleton."""
    global _resolver_instance
    if _resolver_instance is not None:
        return _resolver_instance
    with _resolver_lock:
        if _resolver_instance is None:
            repo = SQLiteSubscriptionRepo(
                settings.db_path, timeout=rules.subscriptions.lookup_timeout_seconds
            )
            _resolver_instance = SubscriptionResolver(
                repo=repo,
                time_port=clock,
                config=entitlements.load_config_from_rules(rules.model_dump()),
            )
    return _resolver_instance


# --- Viewer Identity ---
# Authentication happens upstream; these headers carry the verified identity.


def get_viewer_id(x_viewer_id: Annotated[str | None, Header()] = None) -> str | None:
    if x_viewer_id is None:
        return None
    return x_viewer_id.strip() or None


def require_viewer(viewer_id: str | None = Depends(get_viewer_id)) -> str:
    if viewer_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Viewer identity required",
        )
    return viewer_id


def get_viewer_roles(x_viewer_roles: Annotated[str | None, Header()] = None) -> set[str]:
    if not x_viewer_roles:
        return set()
    return {r.strip().lower() for r in x_viewer_roles.split(",") if r.strip()}


def require_operator(
    viewer_id: str = Depends(require_viewer),
    roles: set[str] = Depends(get_viewer_roles),
    rules: Rules = Depends(get_rules),
) -> str:
    allowed = {r.lower() for r in rules.access.operator_roles}
    if not roles & allowed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Operator role required",
        )
    return viewer_id
