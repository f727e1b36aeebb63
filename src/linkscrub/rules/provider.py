"""Per-site rule registry.

A Provider bundles everything needed to decide whether a URL belongs to a
site and which parts of it are tracking noise. Every pattern is compiled
once when it is registered; an invalid pattern raises InvalidRulePattern
immediately instead of being skipped.
"""

import logging
import re
from typing import Optional

from linkscrub.core.constants import CATCH_ALL_RULE
from linkscrub.core.exceptions import InvalidRulePattern

logger = logging.getLogger(__name__)


class RuleSet:
    """Enabled and disabled pattern strings for one rule category.

    A pattern is never in both sides at once: adding it to one side
    removes it from the other. Enabled patterns keep registration order.
    """

    def __init__(self, provider: str, *, anchored: bool = False) -> None:
        self._provider = provider
        self._anchored = anchored
        self._enabled: dict[str, re.Pattern[str]] = {}
        self._disabled: set[str] = set()

    def add(self, pattern: str, is_active: bool = True) -> None:
        if is_active:
            if pattern not in self._enabled:
                self._enabled[pattern] = self._compile(pattern)
            self._disabled.discard(pattern)
        else:
            self._disabled.add(pattern)
            self._enabled.pop(pattern, None)

    def _compile(self, pattern: str) -> re.Pattern[str]:
        # \Z, unlike $, never matches before a trailing newline
        source = f"^{pattern}\\Z" if self._anchored else pattern
        try:
            return re.compile(source, re.IGNORECASE)
        except (re.error, TypeError) as e:
            raise InvalidRulePattern(pattern, self._provider, str(e)) from e

    @property
    def enabled(self) -> list[str]:
        return list(self._enabled)

    @property
    def disabled(self) -> set[str]:
        return set(self._disabled)

    def compiled(self) -> list[tuple[str, re.Pattern[str]]]:
        return list(self._enabled.items())

    def __contains__(self, pattern: object) -> bool:
        return pattern in self._enabled

    def __len__(self) -> int:
        return len(self._enabled)


class Provider:
    """Matching and cleaning rules for one site.

    Example:
        >>> p = Provider("example")
        >>> p.set_url_pattern(r"^https?://(?:[a-z0-9-]+\\.)*?example\\.com")
        >>> p.add_rule("utm_.*")
        >>> p.match_url("https://www.example.com/?utm_source=x")
        True
    """

    def __init__(
        self,
        name: str,
        complete_provider: bool = False,
        force_redirection: bool = False,
    ) -> None:
        """Initialize Provider.

        Args:
            name: Provider identifier
            complete_provider: Block every matching URL outright
            force_redirection: Hint that redirects need a hard navigation
        """
        self._name = name
        self._url_pattern: Optional[re.Pattern[str]] = None
        self._canceling = complete_provider
        self._force_redirection = force_redirection
        self._methods: list[str] = []

        self._rules = RuleSet(name, anchored=True)
        self._raw_rules = RuleSet(name)
        self._referral_marketing = RuleSet(name, anchored=True)
        self._exceptions = RuleSet(name)
        self._redirections = RuleSet(name)

        if complete_provider:
            self._rules.add(CATCH_ALL_RULE)

    @property
    def name(self) -> str:
        return self._name

    def get_name(self) -> str:
        return self._name

    def is_canceling(self) -> bool:
        return self._canceling

    def should_force_redirect(self) -> bool:
        return self._force_redirection

    # ------------------------------------------------------------------
    # URL matching
    # ------------------------------------------------------------------

    def set_url_pattern(self, pattern: Optional[str]) -> None:
        """Set the URL pattern. An empty or missing pattern never matches."""
        if not pattern:
            self._url_pattern = None
            return
        try:
            self._url_pattern = re.compile(pattern, re.IGNORECASE)
        except (re.error, TypeError) as e:
            raise InvalidRulePattern(pattern, self._name, str(e)) from e

    @property
    def url_pattern(self) -> Optional[str]:
        return self._url_pattern.pattern if self._url_pattern else None

    def match_url(self, url: str) -> bool:
        """Check the URL belongs to this provider and is not an exception."""
        if self._url_pattern is None:
            return False
        return bool(self._url_pattern.search(url)) and not self._match_exception(url)

    def _match_exception(self, url: str) -> bool:
        return any(regex.search(url) for _, regex in self._exceptions.compiled())

    def add_method(self, method: str) -> None:
        if method not in self._methods:
            self._methods.append(method)

    def get_methods(self) -> list[str]:
        return list(self._methods)

    def match_method(self, method: Optional[str]) -> bool:
        """Check the HTTP method. An empty allow-list accepts every method."""
        if not self._methods:
            return True
        return method in self._methods

    # ------------------------------------------------------------------
    # Rule registration
    # ------------------------------------------------------------------

    def add_rule(self, rule: str, is_active: bool = True) -> None:
        self._rules.add(rule, is_active)

    def get_rules(self) -> list[str]:
        return self._rules.enabled

    def add_raw_rule(self, rule: str, is_active: bool = True) -> None:
        self._raw_rules.add(rule, is_active)

    def get_raw_rules(self) -> list[str]:
        return self._raw_rules.enabled

    def add_referral_marketing(self, rule: str, is_active: bool = True) -> None:
        self._referral_marketing.add(rule, is_active)

    def get_referral_marketing(self) -> list[str]:
        return self._referral_marketing.enabled

    def add_exception(self, exception: str, is_active: bool = True) -> None:
        self._exceptions.add(exception, is_active)

    def get_exceptions(self) -> list[str]:
        return self._exceptions.enabled

    def add_redirection(self, redirection: str, is_active: bool = True) -> None:
        self._redirections.add(redirection, is_active)

    def get_redirections(self) -> list[str]:
        return self._redirections.enabled

    # Compiled forms used by the cleaner

    def compiled_rules(self) -> list[tuple[str, re.Pattern[str]]]:
        """Anchored field rules in registration order."""
        return self._rules.compiled()

    def compiled_raw_rules(self) -> list[tuple[str, re.Pattern[str]]]:
        return self._raw_rules.compiled()

    def compiled_referral_marketing(self) -> list[tuple[str, re.Pattern[str]]]:
        return self._referral_marketing.compiled()

    # ------------------------------------------------------------------
    # Redirections
    # ------------------------------------------------------------------

    def get_redirection(self, url: str) -> Optional[str]:
        """Return the embedded target captured by the first matching redirection.

        Returns:
            Value of capture group 1, or None if no redirection matches or
            the group did not participate in the match
        """
        for pattern, regex in self._redirections.compiled():
            match = regex.search(url)
            if match is None:
                continue
            if regex.groups < 1:
                logger.debug(f"Redirection {pattern!r} of {self._name} has no capture group")
                return None
            return match.group(1)
        return None

    def __repr__(self) -> str:
        return (
            f"Provider(name={self._name!r}, rules={len(self._rules)}, "
            f"canceling={self._canceling})"
        )
