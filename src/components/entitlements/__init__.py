"""
Entitlements component.

Public API for resolving a viewer's current subscription.
"""

from .component import SubscriptionResolver, load_config_from_rules
from .models import CacheEntry, LookupSource, ResolveOutput, ResolverConfig
from .ports import SubscriptionRepoPort, TimePort

__all__ = [
    # Service
    "SubscriptionResolver",
    "load_config_from_rules",
    # Models
    "CacheEntry",
    "LookupSource",
    "ResolveOutput",
    "ResolverConfig",
    # Ports
    "SubscriptionRepoPort",
    "TimePort",
]
