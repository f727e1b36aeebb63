"""Field-removal algorithm.

Applies one matched provider to a URL, in this order:
1. Skip local and private hosts
2. Unwrap redirections
3. Block complete providers
4. Strip raw rules from the whole URL
5. Remove query and fragment keys matching the provider's rules
6. Reassemble the URL

Steps 1-3 end processing as soon as they apply.
"""

import logging
from typing import Optional
from urllib.parse import SplitResult, parse_qsl, quote, unquote, urlencode, urlsplit

from linkscrub.cleaner.network import LocalHostPredicate, is_local_host
from linkscrub.core.constants import LogReason, URI_COMPONENT_SAFE
from linkscrub.core.exceptions import InvalidURL
from linkscrub.core.models import CleanerOptions, CleanResult, RuleLogger
from linkscrub.rules.provider import Provider
from linkscrub.utils.hash_params import HashParams

_log = logging.getLogger(__name__)

QueryFields = list[tuple[str, str]]


# ============================================================================
# URL helpers
# ============================================================================

def parse_absolute_url(url: str) -> SplitResult:
    """Split an absolute URL into its components.

    Args:
        url: URL string

    Returns:
        SplitResult of the URL

    Raises:
        InvalidURL: If the URL has no scheme or authority, or its authority
            cannot be parsed
    """
    if not url or not isinstance(url, str):
        raise InvalidURL(f"Invalid URL: {url!r}")

    try:
        parsed = urlsplit(url)
        # Accessing port validates it
        parsed.port
    except ValueError as e:
        raise InvalidURL(f"Failed to parse URL '{url}': {e}") from e

    if not parsed.scheme or not parsed.netloc:
        raise InvalidURL(f"Not an absolute URL: '{url}'")

    return parsed


def decode_url(url: str) -> str:
    """Percent-decode a redirect target until it stops changing.

    Targets that do not start with ``http`` get ``http://`` prepended.
    """
    decoded = unquote(url)
    while decoded != unquote(decoded):
        decoded = unquote(decoded)

    if not decoded.startswith("http"):
        decoded = "http://" + decoded

    return decoded


def url_without_query_and_fragment(parsed: SplitResult) -> str:
    """Return scheme, authority, and path of a URL."""
    path = parsed.path or "/"
    return f"{parsed.scheme}://{parsed.netloc}{path}"


def serialize_query(fields: QueryFields) -> str:
    """Serialize query fields, escaping keys and values like encodeURIComponent.

    Fields with an empty value render as the bare key.
    """
    parts = []
    for key, value in fields:
        key = quote(key, safe=URI_COMPONENT_SAFE)
        if value:
            parts.append(f"{key}={quote(value, safe=URI_COMPONENT_SAFE)}")
        else:
            parts.append(key)
    return "&".join(parts)


def _snapshot(domain: str, fields: QueryFields, fragments: str) -> str:
    url = domain
    if fields:
        url += "?" + urlencode(fields)
    if fragments:
        url += "#" + fragments
    return url


# ============================================================================
# Field removal
# ============================================================================

def remove_fields_from_url(
    provider: Provider,
    url: str,
    *,
    options: Optional[CleanerOptions] = None,
    logger: Optional[RuleLogger] = None,
    is_local: LocalHostPredicate = is_local_host,
) -> CleanResult:
    """Remove the tracking parts of a URL using one provider's rules.

    Args:
        provider: Provider whose pattern matched the URL
        url: URL to clean
        options: Cleaner switches (defaults if None)
        logger: Optional sink notified of every transformation
        is_local: Predicate deciding whether a host is local

    Returns:
        CleanResult with ``redirect`` or ``cancel`` set when processing
        ended early, otherwise the (possibly unchanged) URL

    Raises:
        InvalidURL: If ``url`` is not an absolute URL
    """
    options = options or CleanerOptions()
    pure_url = url
    changes = False

    parsed = parse_absolute_url(url)

    if options.local_hosts_skipping and is_local(parsed.hostname or ""):
        _log.debug(f"Skipping local URL: {url}")
        return CleanResult(url=url)

    target = provider.get_redirection(url)
    if target is not None:
        url = decode_url(target)
        _log.debug(f"{provider.get_name()}: redirect {pure_url} -> {url}")
        if logger is not None:
            logger.log(pure_url, url, LogReason.REDIRECT.value)
        return CleanResult(url=url, redirect=True)

    if provider.is_canceling() and options.domain_blocking:
        _log.debug(f"{provider.get_name()}: blocked {pure_url}")
        if logger is not None:
            logger.log(pure_url, pure_url, LogReason.DOMAIN_BLOCKED.value)
        return CleanResult(url=pure_url, cancel=True)

    for raw_rule, regex in provider.compiled_raw_rules():
        before = url
        stripped = regex.sub("", url)
        if stripped == before:
            continue
        try:
            parse_absolute_url(stripped)
        except InvalidURL:
            _log.warning(
                f"{provider.get_name()}: raw rule {raw_rule!r} would break {before}, ignoring it"
            )
            continue

        url = stripped
        changes = True
        _log.debug(f"{provider.get_name()}: raw rule {raw_rule!r} matched")
        if options.logging_status and logger is not None:
            logger.log(before, url, raw_rule)

    parsed = parse_absolute_url(url)
    domain = url_without_query_and_fragment(parsed)
    fields: QueryFields = parse_qsl(parsed.query, keep_blank_values=True)
    fragments = HashParams(parsed.fragment)

    # Only rebuild the URL when there is something that can be cleaned
    if not fields and not fragments:
        return CleanResult(url=url, changes=changes)

    rules = provider.compiled_rules()
    if not options.allow_referral_marketing:
        rules += provider.compiled_referral_marketing()

    for rule, regex in rules:
        before_url = _snapshot(domain, fields, str(fragments))
        local_change = False

        kept = [(key, value) for key, value in fields if not regex.search(key)]
        if len(kept) != len(fields):
            fields = kept
            local_change = True

        for key in fragments.keys():
            if regex.search(key):
                fragments.delete(key)
                local_change = True

        if local_change:
            changes = True
            _log.debug(f"{provider.get_name()}: rule {rule!r} matched")
            if options.logging_status and logger is not None:
                after_url = _snapshot(domain, fields, str(fragments))
                logger.log(before_url, after_url, rule)

    final_url = domain
    if fields:
        final_url += "?" + serialize_query(fields)
    if fragments:
        final_url += "#" + str(fragments)

    url = final_url.replace("?&", "?", 1).replace("#&", "#", 1)

    return CleanResult(url=url, changes=changes)
