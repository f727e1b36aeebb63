"""Rule-based removal of tracking parameters and redirect wrappers from URLs."""

from linkscrub.core.config import build_registry, load_catalog
from linkscrub.core.exceptions import InvalidRulePattern, InvalidURL, LinkScrubError
from linkscrub.core.models import CleanerOptions, CleanResult, RequestContext
from linkscrub.orchestrator.engine import Orchestrator, clean
from linkscrub.rules.provider import Provider
from linkscrub.rules.registry import ProviderRegistry

__version__ = "0.1.0"

__all__ = [
    "CleanResult",
    "CleanerOptions",
    "InvalidRulePattern",
    "InvalidURL",
    "LinkScrubError",
    "Orchestrator",
    "Provider",
    "ProviderRegistry",
    "RequestContext",
    "build_registry",
    "clean",
    "load_catalog",
]
