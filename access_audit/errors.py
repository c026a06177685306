"""Error taxonomy shared by the audit service and its HTTP boundary."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class AuditError(Exception):
    """Base class for errors that are fatal to a single audit request."""

    code = "AUDIT_ERROR"
    status_code = 500

    def __init__(self, message: str, *, url: Optional[str] = None) -> None:
        self.message = message
        self.url = url
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "url": self.url}


class InvalidUrl(AuditError):
    """The requested target is not an absolute http(s) URL."""

    code = "INVALID_URL"
    status_code = 400


class SessionUnavailable(AuditError):
    """No browser session could be launched for the audit."""

    code = "SESSION_UNAVAILABLE"
    status_code = 503


class NavigationTimeout(AuditError):
    """The target page did not finish loading within the navigation budget."""

    code = "NAVIGATION_TIMEOUT"
    status_code = 504


class ScanFailed(AuditError):
    """The accessibility engine could not be injected or errored while running."""

    code = "SCAN_FAILED"
    status_code = 502


@dataclass(frozen=True)
class NormalizationDropped:
    """A raw result item excluded from the report; logged, never raised."""

    bucket: str
    reason: str
    rule_id: Optional[str] = None
