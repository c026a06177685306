"""High-level orchestration of a single accessibility audit."""
from __future__ import annotations

import asyncio
import time
from typing import Optional
from urllib.parse import urlparse

import structlog

from .audits.normalizer import ResultNormalizer
from .collectors.scanner import ScanExecutor
from .collectors.session import BrowserPool
from .errors import AuditError, InvalidUrl, NavigationTimeout
from .models import AuditReport

logger = structlog.get_logger(__name__)


def validate_url(url: object) -> str:
    """Return ``url`` stripped if it is an absolute http(s) URL, else raise InvalidUrl."""
    if not isinstance(url, str) or not url.strip():
        raise InvalidUrl("URL is required")
    candidate = url.strip()
    parsed = urlparse(candidate)
    if parsed.scheme.lower() not in ("http", "https") or not parsed.netloc or not parsed.hostname:
        raise InvalidUrl(f"Not an absolute http(s) URL: {candidate}", url=candidate)
    try:
        parsed.port
    except ValueError as exc:
        raise InvalidUrl(f"Invalid port in URL: {candidate}", url=candidate) from exc
    return candidate


class AuditService:
    """Coordinates session acquisition, scanning and normalization."""

    def __init__(
        self,
        pool: Optional[BrowserPool] = None,
        scan_executor: Optional[ScanExecutor] = None,
        normalizer: Optional[ResultNormalizer] = None,
        *,
        audit_timeout: Optional[float] = None,
    ) -> None:
        self.pool = pool or BrowserPool()
        self.scan_executor = scan_executor or ScanExecutor()
        self.normalizer = normalizer or ResultNormalizer()
        self.audit_timeout = audit_timeout

    def run(self, url: str) -> AuditReport:
        """Audit ``url`` synchronously; the browser is released on every exit path."""
        target = validate_url(url)
        start = time.monotonic()
        manager = self.pool.session_manager()
        try:
            with manager.session() as handle:
                raw = self.scan_executor.run(handle, target)
                report = self.normalizer.normalize(raw)
        except AuditError as exc:
            logger.warning("audit failed", url=target, code=exc.code, error=exc.message)
            raise
        logger.info(
            "audit completed",
            url=target,
            items=report.total_items,
            dropped=report.dropped,
            elapsed_ms=int((time.monotonic() - start) * 1000),
        )
        return report

    async def audit(self, url: str) -> AuditReport:
        """Audit ``url`` without blocking the event loop.

        The blocking work runs in a worker thread. If the caller goes away or the
        deadline passes, that thread still finishes and releases its browser.
        """
        target = validate_url(url)
        worker = asyncio.ensure_future(asyncio.to_thread(self.run, target))
        try:
            return await asyncio.wait_for(asyncio.shield(worker), timeout=self.audit_timeout)
        except asyncio.TimeoutError as exc:
            worker.add_done_callback(_consume_result)
            raise NavigationTimeout(
                f"Audit of {target} did not complete within {self.audit_timeout:g}s", url=target
            ) from exc
        except asyncio.CancelledError:
            worker.add_done_callback(_consume_result)
            raise

    def close(self) -> None:
        self.pool.close()


def _consume_result(task: "asyncio.Future[AuditReport]") -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.info("abandoned audit finished with error", error=str(exc))
