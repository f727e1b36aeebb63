"""Provider rule registries.

- Provider: one site's URL pattern, rules, exceptions and redirections
- ProviderRegistry: ordered, read-only collection of providers
"""

from linkscrub.rules.provider import Provider, RuleSet
from linkscrub.rules.registry import ProviderRegistry

__all__ = [
    "Provider",
    "ProviderRegistry",
    "RuleSet",
]
