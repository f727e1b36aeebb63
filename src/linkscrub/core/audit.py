"""Audit logging for URL transformations.

This module provides the AuditLogger class, a rule logger that records
every redirect, domain block, and rule hit in JSON Lines format for
later analysis.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from linkscrub.core.constants import AuditEventType, LogReason
from linkscrub.core.exceptions import AuditLogError


class AuditLogger:
    """Rule logger writing one JSON object per transformation.

    Example:
        >>> audit = AuditLogger(Path("./audit/clean.log"))
        >>> engine.clean(url, logger=audit)
        >>> audit.close()
    """

    def __init__(self, log_path: Path) -> None:
        """Initialize audit logger.

        Args:
            log_path: File the events are appended to.

        Raises:
            AuditLogError: If the log file cannot be created.
        """
        self.log_path = Path(log_path)

        try:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
        except Exception as e:
            raise AuditLogError(
                f"Failed to create audit directory {self.log_path.parent}: {e}"
            ) from e

        self._logger = logging.getLogger(f"linkscrub.audit.{self.log_path}")
        self._logger.setLevel(logging.INFO)
        self._logger.propagate = False  # Don't propagate to root logger
        self._logger.handlers.clear()

        try:
            handler = logging.FileHandler(str(self.log_path), mode="a", encoding="utf-8")
            handler.setLevel(logging.INFO)
            handler.setFormatter(logging.Formatter("%(message)s"))
            self._logger.addHandler(handler)
        except Exception as e:
            raise AuditLogError(
                f"Failed to create audit log file {self.log_path}: {e}"
            ) from e

        self.events_logged = 0

    @staticmethod
    def event_type_for(rule: str) -> AuditEventType:
        """Map a logger reason to its audit event type."""
        if rule == LogReason.REDIRECT.value:
            return AuditEventType.REDIRECT
        if rule == LogReason.DOMAIN_BLOCKED.value:
            return AuditEventType.DOMAIN_BLOCKED
        return AuditEventType.RULE

    def log(self, before: str, after: str, rule: str) -> None:
        """Record one transformation.

        Raises:
            AuditLogError: If writing to the log file fails.
        """
        event_type = self.event_type_for(rule)
        event = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event_type": event_type.value,
            "before": before,
            "after": after,
            "rule": rule,
        }

        try:
            self._logger.info(json.dumps(event, ensure_ascii=False))
        except Exception as e:
            raise AuditLogError(
                f"Failed to write audit event {event_type.value}: {e}"
            ) from e

        self.events_logged += 1

    def close(self) -> None:
        """Close audit logger and flush buffers."""
        for handler in self._logger.handlers:
            handler.flush()
            handler.close()
        self._logger.handlers.clear()

    def __enter__(self) -> "AuditLogger":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
