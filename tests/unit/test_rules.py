"""
Rules loading and validation tests.

The real rules.yaml must load, and malformed files must fail fast.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from src.components import access, entitlements, preview
from src.components.release import ReleaseRulesAdapter
from src.rules.loader import load_rules
from src.rules.models import Rules


@pytest.fixture
def project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent.parent


def write_rules(tmp_path: Path, rules: dict[str, Any]) -> Path:
    path = tmp_path / "rules.yaml"
    path.write_text(yaml.dump(rules))
    return path


class TestRulesLoading:
    def test_load_project_rules(self, project_root: Path) -> None:
        rules = load_rules(project_root / "rules.yaml")
        assert rules.project.slug == "premium-release-gate"
        assert rules.access.bulk_max_items == 50
        assert rules.release.batch_max_items == 100
        assert {p.id for p in rules.plans} == {
            "player_monthly",
            "coach_monthly",
            "parent_monthly",
            "premium_yearly",
        }

    def test_defaults_fill_missing_sections(self, tmp_path: Path) -> None:
        path = write_rules(tmp_path, {"project": {"slug": "x", "rules_version": "1"}})
        rules = load_rules(path)
        assert rules.subscriptions.cache_ttl_seconds == 1800
        assert rules.access.upgrade_url == "/pricing"
        assert rules.plans == []

    def test_yaml_block_in_markdown(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.md"
        path.write_text(
            "# Rules\n\n```yaml\nproject:\n  slug: md\n  rules_version: '2'\n```\n\nNotes.\n"
        )
        assert load_rules(path).project.slug == "md"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_rules(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("project: [unclosed")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_rules(path)

    def test_non_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ValueError, match="mapping"):
            load_rules(path)

    def test_unknown_zone_rejected(self, tmp_path: Path) -> None:
        path = write_rules(
            tmp_path,
            {
                "project": {"slug": "x", "rules_version": "1"},
                "plans": [{"id": "p", "name": "P", "price": 1, "zones": ["vip"]}],
            },
        )
        with pytest.raises(ValueError, match="validation failed"):
            load_rules(path)

    def test_duplicate_plan_ids_rejected(self, tmp_path: Path) -> None:
        plan = {"id": "p", "name": "P", "price": 1}
        path = write_rules(
            tmp_path, {"project": {"slug": "x", "rules_version": "1"}, "plans": [plan, plan]}
        )
        with pytest.raises(ValueError, match="Duplicate plan ids"):
            load_rules(path)


class TestComponentConfig:
    """Component config loaders read the dumped rules."""

    @pytest.fixture
    def rules(self, project_root: Path) -> Rules:
        return load_rules(project_root / "rules.yaml")

    def test_access_config(self, rules: Rules) -> None:
        config = access.load_config_from_rules(rules.model_dump())
        assert config.default_preview_length == 300
        assert config.plan_zones["coach_monthly"] == frozenset({"read", "coach", "series"})

    def test_resolver_config(self, rules: Rules) -> None:
        config = entitlements.load_config_from_rules(rules.model_dump())
        assert config.expiring_soon_days == 7

    def test_preview_config(self, rules: Rules) -> None:
        config = preview.load_config_from_rules(rules.model_dump())
        assert config.recommendation_max == 20

    def test_release_rules_adapter(self, rules: Rules) -> None:
        adapter = ReleaseRulesAdapter(rules.model_dump())
        assert adapter.get_batch_max_items() == 100
        assert adapter.get_sweep_batch_limit() == 500
        assert adapter.get_scheduled_list_max() == 100
