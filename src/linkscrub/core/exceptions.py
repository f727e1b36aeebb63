class LinkScrubError(Exception):
    pass

class InvalidURL(LinkScrubError, ValueError):
    """Input is not an absolute URL."""
    pass

class InvalidRulePattern(LinkScrubError):
    """A catalog pattern failed to compile."""

    def __init__(self, pattern: str, provider: str = "", reason: str = "") -> None:
        self.pattern = pattern
        self.provider = provider
        self.reason = reason
        where = f" in provider '{provider}'" if provider else ""
        super().__init__(f"Invalid rule pattern {pattern!r}{where}: {reason}")

class ConfigError(LinkScrubError):
    pass

class CatalogError(ConfigError):
    pass

class AuditLogError(LinkScrubError):
    """Failed to write to the audit log."""
    pass
