import json
from typing import Any, Dict, List, Optional

import pytest

from access_audit.collectors.scanner import ScanExecutor
from access_audit.collectors.session import BrowserPool
from access_audit.models import AuditReport, ResultItem


def rule(rule_id, *, impact="serious", tags=("wcag2a",), nodes=None, **extra) -> Dict[str, Any]:
    payload = {
        "id": rule_id,
        "impact": impact,
        "description": f"{rule_id} description",
        "help": f"{rule_id} help",
        "helpUrl": f"https://dequeuniversity.com/rules/axe/4.8/{rule_id}",
        "tags": list(tags),
        "nodes": nodes if nodes is not None else [{"html": "<img src='a.png'>", "target": ["img"]}],
    }
    payload.update(extra)
    return payload


def axe_payload() -> Dict[str, Any]:
    return {
        "testEngine": {"name": "axe-core", "version": "4.8.2"},
        "timestamp": "2024-05-01T10:00:00.000Z",
        "url": "https://example.com/",
        "violations": [
            rule("image-alt", impact="critical", tags=("cat.text-alternatives", "wcag2a")),
            rule("color-contrast", tags=("cat.color", "wcag2aa")),
        ],
        "passes": [
            rule("html-has-lang", impact=None, tags=("cat.language", "wcag2a"), nodes=[]),
            rule("document-title", impact=None, tags=("cat.text-alternatives", "wcag2a"), nodes=[]),
            rule("button-name", impact=None, tags=("cat.name-role-value", "wcag2a", "section508"), nodes=[]),
        ],
        "incomplete": [rule("frame-tested", impact="critical", tags=("cat.structure",))],
        "inapplicable": [rule("video-caption", impact=None, tags=("cat.time-and-media", "wcag2a"), nodes=[])],
    }


class FakeDriver:
    """Stands in for a Selenium WebDriver; no browser is started."""

    def __init__(
        self,
        *,
        payload: Optional[Dict[str, Any]] = None,
        raw_result: Any = None,
        page_load_error: Optional[Exception] = None,
        script_error: Optional[Exception] = None,
        ready_state: str = "complete",
    ) -> None:
        self.payload = payload if payload is not None else axe_payload()
        self.raw_result = raw_result
        self.page_load_error = page_load_error
        self.script_error = script_error
        self.ready_state = ready_state
        self.visited: List[str] = []
        self.quit_calls = 0
        self.page_load_timeout = None
        self.script_timeout = None

    def set_page_load_timeout(self, timeout):
        self.page_load_timeout = timeout

    def set_script_timeout(self, timeout):
        self.script_timeout = timeout

    def get(self, url):
        self.visited.append(url)
        if self.page_load_error is not None:
            raise self.page_load_error

    def execute_script(self, script, *args):
        if "readyState" in script:
            return self.ready_state
        return None

    def execute_async_script(self, script, *args):
        if self.script_error is not None:
            raise self.script_error
        if self.raw_result is not None:
            return self.raw_result
        return json.dumps(self.payload)

    def quit(self):
        self.quit_calls += 1


class FakeDriverFactory:
    """Creates a fresh FakeDriver per call and remembers each one."""

    def __init__(self, fail_with: Optional[Exception] = None, **driver_kwargs) -> None:
        self.fail_with = fail_with
        self.driver_kwargs = driver_kwargs
        self.created: List[FakeDriver] = []

    def __call__(self) -> FakeDriver:
        if self.fail_with is not None:
            raise self.fail_with
        driver = FakeDriver(**self.driver_kwargs)
        self.created.append(driver)
        return driver


def no_injection(driver) -> None:
    return None


def make_executor(**kwargs) -> ScanExecutor:
    kwargs.setdefault("navigation_timeout", 0.2)
    kwargs.setdefault("injector", no_injection)
    return ScanExecutor(**kwargs)


@pytest.fixture
def driver_factory() -> FakeDriverFactory:
    return FakeDriverFactory()


@pytest.fixture
def pool(driver_factory) -> BrowserPool:
    return BrowserPool(driver_factory, max_sessions=4, acquire_timeout=0.5)


def make_item(rule_id, *, impact="serious", tags=("wcag2a",), description=None):
    return ResultItem(
        id=rule_id,
        impact=impact,
        description=description or f"{rule_id} description",
        tags=tuple(tags),
    )


def make_report(**buckets) -> AuditReport:
    return AuditReport(**{name: tuple(items) for name, items in buckets.items()})
