"""
Unit tests for entitlements config loading.
"""

from src.components.entitlements import ResolverConfig, load_config_from_rules


def test_defaults_when_section_missing() -> None:
    assert load_config_from_rules({}) == ResolverConfig()


def test_section_values_used() -> None:
    config = load_config_from_rules(
        {"subscriptions": {"cache_ttl_seconds": 60, "cache_max_entries": 3}}
    )
    assert config.cache_ttl_seconds == 60
    assert config.cache_max_entries == 3
    assert config.expiring_soon_days == 7
