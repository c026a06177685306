"""Drives a browser session to a URL and runs axe-core against the loaded DOM."""
from __future__ import annotations

import json
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import structlog
from axe_selenium_python import Axe
from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.support.ui import WebDriverWait

from ..errors import NavigationTimeout, ScanFailed
from .session import SessionHandle

logger = structlog.get_logger(__name__)

Injector = Callable[[Any], None]

# The results are stringified in the page so that large result objects never
# go through the WebDriver deserializer.
AXE_RUN_SCRIPT = """
const callback = arguments[arguments.length - 1];
const options = arguments[0] || {};
try {
    window.axe.run(document, options).then(results => {
        callback(JSON.stringify({
            testEngine: results.testEngine || null,
            timestamp: results.timestamp || null,
            url: results.url || null,
            violations: results.violations || [],
            passes: results.passes || [],
            incomplete: results.incomplete || [],
            inapplicable: results.inapplicable || []
        }));
    }).catch(err => {
        callback(JSON.stringify({ error: String(err) }));
    });
} catch (e) {
    callback(JSON.stringify({ error: String(e) }));
}
"""


def inject_axe(driver: Any) -> None:
    """Load the axe-core script bundled with axe-selenium-python into the page."""
    Axe(driver).inject()


def _document_ready(driver: Any) -> bool:
    return driver.execute_script("return document.readyState") == "complete"


@dataclass(frozen=True)
class RawScanResult:
    """Engine output for one page, before normalization."""

    url: str
    payload: Dict[str, Any]
    elapsed_ms: int = 0


class ScanExecutor:
    """Navigates a session and invokes the scanning engine."""

    def __init__(
        self,
        *,
        navigation_timeout: float = 30.0,
        settle_delay: float = 0.0,
        script_timeout: Optional[float] = None,
        injector: Optional[Injector] = None,
        run_options: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.navigation_timeout = navigation_timeout
        self.settle_delay = settle_delay
        self.script_timeout = script_timeout or navigation_timeout
        self.injector = injector or inject_axe
        self.run_options = run_options or {"reporter": "v2"}

    def run(self, handle: SessionHandle, url: str) -> RawScanResult:
        start = time.monotonic()
        self._navigate(handle.driver, url)
        if self.settle_delay:
            time.sleep(self.settle_delay)
        payload = self._scan(handle.driver, url)
        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            "scan finished",
            url=url,
            session_id=handle.session_id,
            elapsed_ms=elapsed_ms,
            violations=len(payload.get("violations") or []),
            passes=len(payload.get("passes") or []),
        )
        return RawScanResult(url=url, payload=payload, elapsed_ms=elapsed_ms)

    def _navigate(self, driver: Any, url: str) -> None:
        logger.debug("navigating", url=url)
        try:
            driver.set_page_load_timeout(self.navigation_timeout)
            driver.get(url)
            WebDriverWait(driver, self.navigation_timeout).until(_document_ready)
        except TimeoutException as exc:
            raise NavigationTimeout(
                f"{url} did not finish loading within {self.navigation_timeout:g}s", url=url
            ) from exc
        except WebDriverException as exc:
            raise NavigationTimeout(f"{url} could not be reached: {exc.msg or exc}", url=url) from exc

    def _scan(self, driver: Any, url: str) -> Dict[str, Any]:
        try:
            self.injector(driver)
        except Exception as exc:
            raise ScanFailed(f"Could not inject the accessibility engine into {url}: {exc}", url=url) from exc

        try:
            driver.set_script_timeout(self.script_timeout)
            raw = driver.execute_async_script(AXE_RUN_SCRIPT, self.run_options)
        except TimeoutException as exc:
            raise ScanFailed(f"Accessibility scan of {url} timed out", url=url) from exc
        except WebDriverException as exc:
            raise ScanFailed(f"Accessibility scan of {url} failed: {exc.msg or exc}", url=url) from exc

        try:
            payload = json.loads(raw) if isinstance(raw, str) else raw
        except ValueError as exc:
            raise ScanFailed(f"Accessibility engine returned unreadable results for {url}", url=url) from exc

        if not isinstance(payload, dict):
            raise ScanFailed(f"Accessibility engine returned no results for {url}", url=url)
        if payload.get("error"):
            raise ScanFailed(f"Accessibility engine error on {url}: {payload['error']}", url=url)
        return payload
