"""HTTP client the reporting UI uses to talk to the audit service."""
from __future__ import annotations

from typing import Optional

import httpx
import structlog

from ..models import AuditReport

logger = structlog.get_logger(__name__)


class AuditRequestFailed(Exception):
    """Any failure to obtain a report from the service."""

    def __init__(self, code: str, message: str, status_code: Optional[int] = None) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        super().__init__(f"{code}: {message}")


class AuditClient:
    """Thin wrapper around ``POST /audit`` and ``GET /health``."""

    def __init__(
        self,
        base_url: str = "http://localhost:3001",
        *,
        timeout: float = 180.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _client(self, timeout: Optional[float] = None) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            timeout=timeout or self.timeout,
            transport=self.transport,
        )

    def audit(self, url: str) -> AuditReport:
        try:
            with self._client() as client:
                response = client.post("/audit", json={"url": url})
        except httpx.TimeoutException as exc:
            raise AuditRequestFailed("TIMEOUT", f"Timeout after {self.timeout:g}s") from exc
        except httpx.RequestError as exc:
            raise AuditRequestFailed("SERVICE_UNREACHABLE", f"Request failed: {exc}") from exc

        if response.is_error:
            code, message = "HTTP_ERROR", f"HTTP {response.status_code}"
            try:
                error = response.json().get("error") or {}
                code = error.get("code", code)
                message = error.get("message", message)
            except (ValueError, AttributeError):
                pass
            raise AuditRequestFailed(code, message, response.status_code)

        try:
            return AuditReport.from_dict(response.json())
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise AuditRequestFailed("BAD_RESPONSE", "Audit service returned an unreadable report") from exc

    def health(self) -> bool:
        try:
            with self._client(timeout=5.0) as client:
                response = client.get("/health")
        except httpx.HTTPError as exc:
            logger.warning("health check failed", base_url=self.base_url, error=str(exc))
            return False
        return response.status_code == 200
