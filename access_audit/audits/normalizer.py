"""Maps raw axe-core output onto the stable report schema."""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..collectors.scanner import RawScanResult
from ..errors import NormalizationDropped
from ..models import IMPACT_LEVELS, AuditReport, EngineInfo, NodeRef, ResultItem

logger = structlog.get_logger(__name__)

DEFAULT_DESCRIPTION = "No description available"

# Engine buckets, in testsRun concatenation order.
RAW_BUCKETS = ("passes", "violations", "inapplicable", "incomplete")


class RawNode(BaseModel):
    """A node entry as produced by the engine."""

    model_config = ConfigDict(extra="ignore")

    html: str = ""
    target: List[Any] = Field(default_factory=list)
    failureSummary: Optional[str] = None

    @field_validator("html", mode="before")
    @classmethod
    def _coerce_html(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("target", mode="before")
    @classmethod
    def _coerce_target(cls, value: Any) -> List[Any]:
        if value is None:
            return []
        if isinstance(value, (list, tuple)):
            return list(value)
        return [value]


class RawRule(BaseModel):
    """One rule outcome as produced by the engine; unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore")

    id: str
    impact: Optional[str] = None
    description: Optional[str] = None
    help: Optional[str] = None
    helpUrl: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    nodes: List[RawNode] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _require_id(cls, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("missing rule id")
        return value.strip()

    @field_validator("impact", "helpUrl", mode="before")
    @classmethod
    def _drop_non_string(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None

    @field_validator("description", "help", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Optional[str]:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        if not isinstance(value, (list, tuple)):
            raise ValueError("tags must be a list")
        return [str(tag) for tag in value]


def _normalize_impact(value: Optional[str]) -> str:
    if value and value.lower() in IMPACT_LEVELS:
        return value.lower()
    return "N/A"


def _target_parts(target: List[Any]) -> Tuple[str, ...]:
    # Targets inside iframes/shadow roots arrive as nested selector lists.
    parts = []
    for entry in target:
        if isinstance(entry, (list, tuple)):
            parts.append(" >>> ".join(str(piece) for piece in entry))
        else:
            parts.append(str(entry))
    return tuple(parts)


class ResultNormalizer:
    """Validates raw rule outcomes and converts them into report items."""

    def normalize(self, raw: RawScanResult) -> AuditReport:
        payload = raw.payload or {}
        dropped: List[NormalizationDropped] = []
        buckets: Dict[str, List[RawRule]] = {}
        for bucket in RAW_BUCKETS:
            buckets[bucket] = self._validate_bucket(payload.get(bucket), bucket, dropped, raw.url)

        def _items(bucket: str) -> Tuple[ResultItem, ...]:
            return tuple(self._to_item(rule) for rule in buckets[bucket])

        tests_run = tuple(
            self._to_test_entry(rule) for bucket in RAW_BUCKETS for rule in buckets[bucket]
        )

        engine = payload.get("testEngine")
        report = AuditReport(
            violations=_items("violations"),
            passes=_items("passes"),
            incomplete=_items("incomplete"),
            inapplicable=_items("inapplicable"),
            tests_run=tests_run,
            url=raw.url,
            engine=EngineInfo(name=str(engine.get("name") or "axe-core"), version=engine.get("version"))
            if isinstance(engine, dict)
            else None,
            timestamp=payload.get("timestamp"),
            dropped=len(dropped),
        )
        if dropped:
            logger.warning("normalization dropped items", url=raw.url, dropped=len(dropped))
        return report

    def _validate_bucket(
        self,
        entries: Any,
        bucket: str,
        dropped: List[NormalizationDropped],
        url: str,
    ) -> List[RawRule]:
        if entries is None:
            return []
        if not isinstance(entries, list):
            logger.warning("malformed result bucket", url=url, bucket=bucket, kind=type(entries).__name__)
            dropped.append(NormalizationDropped(bucket=bucket, reason="bucket is not a list"))
            return []

        rules = []
        for entry in entries:
            if not isinstance(entry, dict):
                dropped.append(NormalizationDropped(bucket=bucket, reason="item is not an object"))
                logger.warning("dropped result item", url=url, bucket=bucket, reason="item is not an object")
                continue
            try:
                rules.append(RawRule.model_validate(entry))
            except ValidationError as exc:
                rule_id = entry.get("id") if isinstance(entry.get("id"), str) else None
                reason = "; ".join(error["msg"] for error in exc.errors())
                dropped.append(NormalizationDropped(bucket=bucket, reason=reason, rule_id=rule_id))
                logger.warning("dropped result item", url=url, bucket=bucket, rule_id=rule_id, reason=reason)
        return rules

    def _to_item(self, rule: RawRule) -> ResultItem:
        return ResultItem(
            id=rule.id,
            impact=_normalize_impact(rule.impact),
            description=rule.description or DEFAULT_DESCRIPTION,
            tags=tuple(rule.tags),
            nodes=tuple(
                NodeRef(
                    html=node.html,
                    target=_target_parts(node.target),
                    failure_summary=node.failureSummary,
                )
                for node in rule.nodes
            ),
            help=rule.help,
            help_url=rule.helpUrl,
        )

    def _to_test_entry(self, rule: RawRule) -> ResultItem:
        return ResultItem(
            id=rule.id,
            impact=None,
            description=rule.description or DEFAULT_DESCRIPTION,
            tags=tuple(rule.tags),
            help=rule.help,
            help_url=rule.helpUrl,
        )
