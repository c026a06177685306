"""Holds the last fetched report and the category/tag selection over it."""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Tuple

import structlog

from ..models import AuditReport, Category, ResultItem
from ..scoring import AccessibilityScore
from .api import AuditClient, AuditRequestFailed
from .filters import ALL_TAGS, available_tags, filter_by_tag
from .viewmodels import TabLabel

logger = structlog.get_logger(__name__)

FAILURE_MESSAGE = "Failed to audit this page. Check the URL and try again."


class StoreStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class FilterState:
    active_category: Category = Category.PASSES
    active_tag: str = ALL_TAGS


class ReportStore:
    """Idle -> Loading -> Ready(report) | Failed(error) state machine."""

    def __init__(self, default_category: Category = Category.PASSES) -> None:
        self.status = StoreStatus.IDLE
        self.report: Optional[AuditReport] = None
        self.error: Optional[Exception] = None
        self.url: Optional[str] = None
        self.filter = FilterState(active_category=Category(default_category))

    # -- lifecycle -----------------------------------------------------

    def begin_loading(self, url: str) -> None:
        self.status = StoreStatus.LOADING
        self.url = url
        self.report = None
        self.error = None

    def resolve(self, report: AuditReport) -> None:
        self.status = StoreStatus.READY
        self.report = report
        self.error = None
        self.filter = replace(self.filter, active_tag=ALL_TAGS)

    def fail(self, error: Exception) -> None:
        self.status = StoreStatus.FAILED
        self.report = None
        self.error = error
        logger.warning("audit request failed", url=self.url, error=str(error))

    def load(self, client: AuditClient, url: str) -> StoreStatus:
        """Fetch a report for ``url`` through ``client`` and settle the state."""
        self.begin_loading(url)
        try:
            report = client.audit(url)
        except AuditRequestFailed as exc:
            self.fail(exc)
        else:
            self.resolve(report)
        return self.status

    def retry(self, client: AuditClient) -> StoreStatus:
        if not self.url:
            raise RuntimeError("Nothing to retry: no audit has been requested yet")
        return self.load(client, self.url)

    # -- selection -----------------------------------------------------

    def select_category(self, category: Category) -> None:
        self.filter = FilterState(active_category=Category(category), active_tag=ALL_TAGS)

    def select_tag(self, tag: str) -> None:
        if tag not in self.available_tags:
            tag = ALL_TAGS
        self.filter = replace(self.filter, active_tag=tag)

    # -- derived views -------------------------------------------------

    @property
    def is_ready(self) -> bool:
        return self.status is StoreStatus.READY and self.report is not None

    @property
    def failure_message(self) -> Optional[str]:
        return FAILURE_MESSAGE if self.status is StoreStatus.FAILED else None

    def category_items(self) -> Tuple[ResultItem, ...]:
        if not self.is_ready:
            return ()
        return self.report.items(self.filter.active_category)

    @property
    def available_tags(self) -> Tuple[str, ...]:
        return available_tags(self.category_items())

    @property
    def visible_items(self) -> List[ResultItem]:
        return filter_by_tag(self.category_items(), self.filter.active_tag)

    @property
    def score(self) -> Optional[AccessibilityScore]:
        if not self.is_ready:
            return None
        return AccessibilityScore.from_report(self.report)

    def tab_labels(self) -> List[TabLabel]:
        counts = self.report.counts() if self.is_ready else {}
        return [
            TabLabel(
                category=category,
                label=category.label,
                count=counts.get(category, 0),
                selected=category is self.filter.active_category,
            )
            for category in Category
        ]
