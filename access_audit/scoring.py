"""Derives the accessibility score from the categorized result counts."""
from __future__ import annotations

from dataclasses import dataclass

from .models import AuditReport


def calculate_accessibility_score(tests_run: int, passes: int, inapplicable: int) -> float:
    """Percentage of applicable tests that passed, rounded to two decimals.

    A report where every test was inapplicable has no applicable tests and
    scores 0.0 instead of dividing by zero.
    """
    applicable = tests_run - inapplicable
    if applicable <= 0:
        return 0.0
    score = (passes / applicable) * 100
    return round(min(max(score, 0.0), 100.0), 2)


def format_score(score: float) -> str:
    return f"{score:.2f}"


@dataclass(frozen=True)
class AccessibilityScore:
    """The score together with the counts it was derived from."""

    tests_run: int
    passes: int
    inapplicable: int

    @property
    def value(self) -> float:
        return calculate_accessibility_score(self.tests_run, self.passes, self.inapplicable)

    @property
    def display(self) -> str:
        return f"{format_score(self.value)}%"

    @classmethod
    def from_report(cls, report: AuditReport) -> "AccessibilityScore":
        return cls(
            tests_run=len(report.tests_run),
            passes=len(report.passes),
            inapplicable=len(report.inapplicable),
        )

    def to_dict(self) -> dict:
        return {
            "value": self.value,
            "tests_run": self.tests_run,
            "passes": self.passes,
            "inapplicable": self.inapplicable,
        }
