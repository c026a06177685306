"""Three-page detail dialog for a selected result item."""
from __future__ import annotations

from enum import IntEnum
from typing import Optional

import structlog

from ..models import ResultItem
from .formatting import remove_hyphen
from .knowledge import KnowledgeBase, RemediationRecord
from .viewmodels import (
    NO_DATA,
    AnalysisPageView,
    DetailView,
    FixesPageView,
    FixStepView,
    ImpactPageView,
    PageContent,
    impact_color,
)

logger = structlog.get_logger(__name__)

DETAIL_CONTENT_ID = "detail-content"
NEXT_KEY = "ArrowRight"
BACK_KEY = "ArrowLeft"


class DetailPage(IntEnum):
    IMPACT = 1
    ANALYSIS = 2
    FIXES = 3


FIRST_PAGE = DetailPage.IMPACT
LAST_PAGE = DetailPage.FIXES


class DetailNavigator:
    """Linear Page1 <-> Page2 <-> Page3 machine; closing resets it completely.

    Every page change requests focus on the detail content region so that
    assistive technology reads the new page from its start.
    """

    def __init__(self, knowledge_base: Optional[KnowledgeBase] = None) -> None:
        self.knowledge_base = knowledge_base
        self.selected_item: Optional[ResultItem] = None
        self.page = FIRST_PAGE
        self.record: Optional[RemediationRecord] = None
        self._focus_request: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.selected_item is not None

    def open(self, item: ResultItem) -> None:
        self.selected_item = item
        self.page = FIRST_PAGE
        self.record = self._lookup(item.id)
        self._focus_request = DETAIL_CONTENT_ID

    def close(self) -> None:
        self.selected_item = None
        self.page = FIRST_PAGE
        self.record = None
        self._focus_request = None

    def next(self) -> bool:
        if not self.is_open or self.page is LAST_PAGE:
            return False
        return self._go_to(DetailPage(self.page + 1))

    def back(self) -> bool:
        if not self.is_open or self.page is FIRST_PAGE:
            return False
        return self._go_to(DetailPage(self.page - 1))

    def primary_action(self) -> None:
        """The right-hand button: Next on pages 1-2, Close on page 3."""
        if self.page is LAST_PAGE:
            self.close()
        else:
            self.next()

    def handle_key(self, key: str, *, in_text_input: bool = False) -> bool:
        """Arrow-key navigation; keys typed into a text field are left alone."""
        if not self.is_open or in_text_input:
            return False
        if key == NEXT_KEY:
            return self.next()
        if key == BACK_KEY:
            return self.back()
        return False

    def consume_focus_request(self) -> Optional[str]:
        """Element id to focus after the last transition, at most once."""
        target, self._focus_request = self._focus_request, None
        return target

    def view(self) -> Optional[DetailView]:
        if self.selected_item is None:
            return None
        resource = None
        if self.record and len(self.record.resources) >= self.page:
            resource = self.record.resources[self.page - 1]
        return DetailView(
            title=remove_hyphen(self.selected_item.id),
            page=int(self.page),
            page_count=len(DetailPage),
            content=self._page_content(),
            resource_title=resource.title if resource else None,
            resource_url=resource.url if resource else None,
            has_remediation=self.record is not None,
        )

    def _go_to(self, page: DetailPage) -> bool:
        self.page = page
        self._focus_request = DETAIL_CONTENT_ID
        return True

    def _lookup(self, rule_id: str) -> Optional[RemediationRecord]:
        if self.knowledge_base is None:
            return None
        try:
            return self.knowledge_base.lookup(rule_id)
        except Exception as exc:
            logger.warning("remediation lookup failed", rule_id=rule_id, error=str(exc))
            return None

    def _page_content(self) -> PageContent:
        item = self.selected_item
        record = self.record
        if self.page is DetailPage.IMPACT:
            impact = item.impact or "Unknown"
            return ImpactPageView(
                impact=impact,
                impact_color=impact_color(impact),
                issue_explanation=(record and record.issue_explanation) or item.description or NO_DATA,
                why_it_matters=(record and record.impact_description) or NO_DATA,
            )
        if self.page is DetailPage.ANALYSIS:
            return AnalysisPageView(
                failure_conditions=(record and record.failure_conditions) or NO_DATA,
                common_causes=(record and record.common_causes) or NO_DATA,
                best_practices=record.best_practices if record else (),
            )
        return FixesPageView(
            fixes=tuple(
                FixStepView(step=fix.step, code_reference=fix.code_reference)
                for fix in (record.fixes if record else ())
            ),
            code_before=(record and record.code_before) or NO_DATA,
            code_after=(record and record.code_after) or NO_DATA,
            help_url=item.help_url,
        )
