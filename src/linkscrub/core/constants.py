"""Constants used throughout linkscrub.

This module contains enums, default values, and static tables
shared by the rule engine and its collaborators.
"""

from enum import Enum


class LogReason(str, Enum):
    """Reasons passed to a rule logger for non-rule events."""
    REDIRECT = "redirect"
    DOMAIN_BLOCKED = "domain_blocked"


class AuditEventType(str, Enum):
    """Types of events recorded in the audit log."""
    REDIRECT = "redirect"
    DOMAIN_BLOCKED = "domain_blocked"
    RULE = "rule"


# Reserved ranges whose hosts are never cleaned
LOCAL_NETWORKS = (
    "10.0.0.0/8",
    "172.16.0.0/12",
    "192.168.0.0/16",
    "100.64.0.0/10",
    "169.254.0.0/16",
    "127.0.0.1",
)

LOCALHOST = "localhost"

# Catch-all rule registered for complete (blocking) providers
CATCH_ALL_RULE = ".*"

# Characters left unescaped by encodeURIComponent
URI_COMPONENT_SAFE = "-_.!~*'()"

CATALOG_ENV_VAR = "LINKSCRUB_CATALOG"

DEFAULTS = {
    "local_hosts_skipping": True,
    "domain_blocking": True,
    "logging_status": True,
    "allow_referral_marketing": False,
}
