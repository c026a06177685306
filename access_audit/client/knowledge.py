"""Lookup of remediation guidance keyed by rule id."""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Tuple

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_KNOWLEDGE_BASE = Path(__file__).resolve().parent.parent / "data" / "remediation.json"


@dataclass(frozen=True)
class FixStep:
    step: str
    code_reference: Optional[str] = None


@dataclass(frozen=True)
class Resource:
    title: str
    url: str


@dataclass(frozen=True)
class RemediationRecord:
    """Guidance for one rule: what it means, why it matters and how to fix it."""

    rule_id: str
    issue_explanation: Optional[str] = None
    wcag_guidelines: Tuple[str, ...] = ()
    impact_severity: Optional[str] = None
    impact_description: Optional[str] = None
    failure_conditions: Optional[str] = None
    common_causes: Optional[str] = None
    fixes: Tuple[FixStep, ...] = ()
    best_practices: Tuple[str, ...] = ()
    code_before: Optional[str] = None
    code_after: Optional[str] = None
    resources: Tuple[Resource, ...] = ()

    @classmethod
    def from_dict(cls, rule_id: str, payload: Dict[str, Any]) -> "RemediationRecord":
        impact = payload.get("impact") or {}
        analysis = payload.get("technical_analysis") or {}
        if isinstance(analysis, str):
            analysis = {"failure_conditions": analysis}
        examples = payload.get("code_examples") or {}
        return cls(
            rule_id=payload.get("rule_id") or rule_id,
            issue_explanation=payload.get("issue_explanation"),
            wcag_guidelines=tuple(payload.get("wcag_guidelines") or ()),
            impact_severity=impact.get("severity") if isinstance(impact, dict) else None,
            impact_description=impact.get("description") if isinstance(impact, dict) else str(impact),
            failure_conditions=analysis.get("failure_conditions"),
            common_causes=analysis.get("common_causes"),
            fixes=tuple(
                FixStep(step=fix.get("step", ""), code_reference=fix.get("code_reference"))
                if isinstance(fix, dict)
                else FixStep(step=str(fix))
                for fix in payload.get("fixes") or ()
            ),
            best_practices=tuple(str(item) for item in payload.get("best_practices") or ()),
            code_before=examples.get("before"),
            code_after=examples.get("after"),
            resources=tuple(
                Resource(title=res.get("title", res.get("url", "")), url=res["url"])
                for res in payload.get("resources") or ()
                if isinstance(res, dict) and res.get("url")
            ),
        )


class KnowledgeBase(Protocol):
    def lookup(self, rule_id: str) -> Optional[RemediationRecord]:
        ...


class JsonKnowledgeBase:
    """Remediation records read from a JSON object keyed by rule id.

    A missing or unreadable file behaves like an empty knowledge base.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path else DEFAULT_KNOWLEDGE_BASE
        self._records: Optional[Dict[str, Dict[str, Any]]] = None

    def _load(self) -> Dict[str, Dict[str, Any]]:
        if self._records is None:
            try:
                data = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as exc:
                logger.warning("knowledge base unavailable", path=str(self.path), error=str(exc))
                data = {}
            self._records = data if isinstance(data, dict) else {}
        return self._records

    def lookup(self, rule_id: str) -> Optional[RemediationRecord]:
        if not isinstance(rule_id, str):
            return None
        payload = self._load().get(rule_id)
        if not isinstance(payload, dict):
            return None
        try:
            return RemediationRecord.from_dict(rule_id, payload)
        except (AttributeError, TypeError, KeyError) as exc:
            logger.warning("malformed remediation record", rule_id=rule_id, error=str(exc))
            return None

    def __contains__(self, rule_id: object) -> bool:
        return isinstance(rule_id, str) and rule_id in self._load()
