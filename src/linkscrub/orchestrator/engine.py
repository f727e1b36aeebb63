"""Cleaning orchestrator.

Runs every matching provider of a registry over a URL, feeding each
provider the URL produced by the previous one, and stops at the first
redirect or cancel.
"""

import logging
from collections.abc import Iterable
from typing import Optional

from linkscrub.cleaner.fields import parse_absolute_url, remove_fields_from_url
from linkscrub.cleaner.network import LocalHostPredicate, is_local_host
from linkscrub.core.models import CleanerOptions, CleanResult, RequestContext, RuleLogger
from linkscrub.rules.provider import Provider
from linkscrub.rules.registry import ProviderRegistry

_log = logging.getLogger(__name__)


class Orchestrator:
    """Apply a provider registry to URLs.

    The orchestrator holds no per-call state, so one instance can serve
    concurrent callers as long as the registry is not modified.

    Example:
        >>> engine = Orchestrator(load_catalog("catalog.yaml"))
        >>> engine.clean("https://example.com/?utm_source=x").url
        'https://example.com/'
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        options: Optional[CleanerOptions] = None,
        *,
        is_local: LocalHostPredicate = is_local_host,
    ) -> None:
        """Initialize Orchestrator.

        Args:
            registry: Providers in precedence order
            options: Cleaner switches (defaults if None)
            is_local: Predicate deciding whether a host is local
        """
        self.registry = registry
        self.options = options or CleanerOptions()
        self.is_local = is_local

    def _matches(self, provider: Provider, url: str, context: Optional[RequestContext]) -> bool:
        if not provider.match_url(url):
            return False
        if context is not None and context.method is not None:
            return provider.match_method(context.method)
        return True

    def matching_providers(
        self,
        url: str,
        context: Optional[RequestContext] = None,
    ) -> list[str]:
        """List providers matching a URL without cleaning it."""
        return [
            provider.get_name()
            for provider in self.registry
            if self._matches(provider, url, context)
        ]

    def clean(
        self,
        url: str,
        context: Optional[RequestContext] = None,
        logger: Optional[RuleLogger] = None,
    ) -> CleanResult:
        """Clean a URL with every matching provider.

        Args:
            url: Absolute URL to clean
            context: Optional request details (HTTP method)
            logger: Optional sink notified of every transformation

        Returns:
            Merged CleanResult; ``providers`` lists every provider consulted

        Raises:
            InvalidURL: If ``url`` is not an absolute URL
        """
        parse_absolute_url(url)
        result = CleanResult(url=url)

        for provider in self.registry:
            if not self._matches(provider, result.url, context):
                continue

            _log.debug(f"Provider {provider.get_name()} matched {result.url}")
            result.providers.append(provider.get_name())

            processed = remove_fields_from_url(
                provider,
                result.url,
                options=self.options,
                logger=logger,
                is_local=self.is_local,
            )

            result.url = processed.url
            result.changes = result.changes or processed.changes
            result.redirect = result.redirect or processed.redirect
            result.cancel = result.cancel or processed.cancel

            if result.is_final:
                break

        return result

    def clean_many(
        self,
        urls: Iterable[str],
        context: Optional[RequestContext] = None,
        logger: Optional[RuleLogger] = None,
    ) -> list[CleanResult]:
        """Clean several URLs, returning results in input order."""
        return [self.clean(url, context, logger) for url in urls]


def clean(
    url: str,
    registry: ProviderRegistry,
    context: Optional[RequestContext] = None,
    logger: Optional[RuleLogger] = None,
    options: Optional[CleanerOptions] = None,
) -> CleanResult:
    """Clean a URL against a registry using a throwaway Orchestrator."""
    return Orchestrator(registry, options).clean(url, context, logger)
