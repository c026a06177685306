"""Typed view-models handed to the UI, one per rendered component."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from ..models import Category, ResultItem
from .formatting import remove_hyphen

NO_DATA = "No data available."

IMPACT_COLORS = {
    "n/a": "green",
    "minor": "green",
    "moderate": "orange",
    "serious": "red",
    "critical": "darkred",
}


def impact_color(impact: Optional[str]) -> str:
    return IMPACT_COLORS.get((impact or "").lower(), "black")


@dataclass(frozen=True)
class TabLabel:
    category: Category
    label: str
    count: int
    selected: bool = False

    @property
    def text(self) -> str:
        return f"{self.label} ({self.count})"


@dataclass(frozen=True)
class ResultCardView:
    """One card in the results list."""

    rule_id: str
    title: str
    impact: str
    impact_color: str
    description: str

    @classmethod
    def from_item(cls, item: ResultItem) -> "ResultCardView":
        impact = item.impact or "N/A"
        return cls(
            rule_id=item.id,
            title=remove_hyphen(item.id),
            impact=impact,
            impact_color=impact_color(impact),
            description=item.description,
        )


@dataclass(frozen=True)
class ImpactPageView:
    impact: str
    impact_color: str
    issue_explanation: str
    why_it_matters: str


@dataclass(frozen=True)
class AnalysisPageView:
    failure_conditions: str
    common_causes: str
    best_practices: Tuple[str, ...]


@dataclass(frozen=True)
class FixStepView:
    step: str
    code_reference: Optional[str] = None


@dataclass(frozen=True)
class FixesPageView:
    fixes: Tuple[FixStepView, ...]
    code_before: str
    code_after: str
    help_url: Optional[str] = None


PageContent = Union[ImpactPageView, AnalysisPageView, FixesPageView]


@dataclass(frozen=True)
class DetailView:
    """Everything the detail dialog needs to render its current page."""

    title: str
    page: int
    page_count: int
    content: PageContent
    resource_title: Optional[str]
    resource_url: Optional[str]
    has_remediation: bool

    @property
    def can_go_back(self) -> bool:
        return self.page > 1

    @property
    def is_last_page(self) -> bool:
        return self.page >= self.page_count

    @property
    def primary_action(self) -> str:
        return "Close" if self.is_last_page else "Next"
