"""Core data models for linkscrub.

This module defines the result and option structures passed between the
orchestrator, the URL cleaner, and their callers.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

from linkscrub.core.constants import DEFAULTS


class RuleLogger(Protocol):
    """Sink notified of every URL transformation."""

    def log(self, before: str, after: str, rule: str) -> None:
        ...


@dataclass
class RequestContext:
    """Request details a host may supply alongside the URL."""
    method: Optional[str] = None


@dataclass
class CleanerOptions:
    """Switches controlling the field-removal algorithm."""
    local_hosts_skipping: bool = DEFAULTS["local_hosts_skipping"]
    domain_blocking: bool = DEFAULTS["domain_blocking"]
    logging_status: bool = DEFAULTS["logging_status"]
    allow_referral_marketing: bool = DEFAULTS["allow_referral_marketing"]


@dataclass
class CleanResult:
    """Outcome of cleaning one URL."""
    url: str
    changes: bool = False
    redirect: bool = False
    cancel: bool = False
    providers: list[str] = field(default_factory=list)

    @property
    def is_final(self) -> bool:
        """Check if no further provider may be consulted."""
        return self.redirect or self.cancel

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "changes": self.changes,
            "redirect": self.redirect,
            "cancel": self.cancel,
            "providers": list(self.providers),
        }
