"""Stable report schema shared by the audit service and the reporting UI."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

IMPACT_LEVELS = ("N/A", "minor", "moderate", "serious", "critical")


class Category(str, Enum):
    """The five result collections of an audit report."""

    VIOLATIONS = "violations"
    PASSES = "passes"
    INCOMPLETE = "incomplete"
    INAPPLICABLE = "inapplicable"
    TESTS_RUN = "testsRun"

    @property
    def label(self) -> str:
        return _CATEGORY_LABELS[self]


_CATEGORY_LABELS = {
    Category.VIOLATIONS: "Violations",
    Category.PASSES: "Passes",
    Category.INCOMPLETE: "Incomplete",
    Category.INAPPLICABLE: "Inapplicable",
    Category.TESTS_RUN: "Tests Ran",
}


@dataclass(frozen=True)
class NodeRef:
    """A DOM location reported for a rule; display only."""

    html: str
    target: Tuple[str, ...] = ()
    failure_summary: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "html": self.html,
            "target": list(self.target),
            "failureSummary": self.failure_summary,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "NodeRef":
        return cls(
            html=str(payload.get("html") or ""),
            target=tuple(str(part) for part in payload.get("target") or ()),
            failure_summary=payload.get("failureSummary"),
        )


@dataclass(frozen=True)
class ResultItem:
    """One rule-evaluation outcome."""

    id: str
    impact: Optional[str]
    description: str
    tags: Tuple[str, ...] = ()
    nodes: Tuple[NodeRef, ...] = ()
    help: Optional[str] = None
    help_url: Optional[str] = None

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "impact": self.impact,
            "description": self.description,
            "help": self.help,
            "helpUrl": self.help_url,
            "tags": list(self.tags),
            "nodes": [node.to_dict() for node in self.nodes],
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ResultItem":
        return cls(
            id=str(payload["id"]),
            impact=payload.get("impact"),
            description=str(payload.get("description") or ""),
            tags=tuple(str(tag) for tag in payload.get("tags") or ()),
            nodes=tuple(NodeRef.from_dict(node) for node in payload.get("nodes") or ()),
            help=payload.get("help") or payload.get("title"),
            help_url=payload.get("helpUrl"),
        )


@dataclass(frozen=True)
class EngineInfo:
    """Name and version of the engine that produced a report."""

    name: str
    version: Optional[str] = None

    def to_dict(self) -> dict:
        return {"name": self.name, "version": self.version}


@dataclass(frozen=True)
class AuditReport:
    """Normalized result of one audit; superseded, never mutated."""

    violations: Tuple[ResultItem, ...] = ()
    passes: Tuple[ResultItem, ...] = ()
    incomplete: Tuple[ResultItem, ...] = ()
    inapplicable: Tuple[ResultItem, ...] = ()
    tests_run: Tuple[ResultItem, ...] = ()
    url: Optional[str] = None
    engine: Optional[EngineInfo] = None
    timestamp: Optional[str] = None
    dropped: int = field(default=0, compare=False)

    def items(self, category: Category) -> Tuple[ResultItem, ...]:
        return {
            Category.VIOLATIONS: self.violations,
            Category.PASSES: self.passes,
            Category.INCOMPLETE: self.incomplete,
            Category.INAPPLICABLE: self.inapplicable,
            Category.TESTS_RUN: self.tests_run,
        }[Category(category)]

    def counts(self) -> Dict[Category, int]:
        return {category: len(self.items(category)) for category in Category}

    @property
    def total_items(self) -> int:
        return sum(self.counts().values())

    def to_dict(self) -> dict:
        payload: Dict[str, Any] = {
            category.value: [item.to_dict() for item in self.items(category)]
            for category in Category
        }
        payload["url"] = self.url
        payload["engine"] = self.engine.to_dict() if self.engine else None
        payload["timestamp"] = self.timestamp
        return payload

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "AuditReport":
        def _items(key: str) -> Tuple[ResultItem, ...]:
            return tuple(ResultItem.from_dict(item) for item in payload.get(key) or () if item.get("id"))

        engine = payload.get("engine")
        return cls(
            violations=_items("violations"),
            passes=_items("passes"),
            incomplete=_items("incomplete"),
            inapplicable=_items("inapplicable"),
            tests_run=_items("testsRun"),
            url=payload.get("url"),
            engine=EngineInfo(name=engine.get("name", ""), version=engine.get("version")) if engine else None,
            timestamp=payload.get("timestamp"),
        )
