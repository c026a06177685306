"""Report export utilities (JSON, Markdown and PDF)."""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .client.formatting import remove_hyphen
from .models import AuditReport, Category, ResultItem
from .scoring import AccessibilityScore


def _report_document(report: AuditReport) -> dict:
    payload = report.to_dict()
    payload["score"] = AccessibilityScore.from_report(report).to_dict()
    return payload


@dataclass
class JSONReportWriter:
    """Writes a report and its score to a JSON artifact."""

    indent: int = 2

    def write(self, report: AuditReport, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.render(report), encoding="utf-8")
        return path

    def render(self, report: AuditReport) -> str:
        return json.dumps(_report_document(report), indent=self.indent, ensure_ascii=False)


@dataclass
class MarkdownReportWriter:
    """Writes a human-readable markdown summary."""

    title: str = "Accessibility Audit Report"
    max_nodes: int = 3

    def write(self, report: AuditReport, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.render(report), encoding="utf-8")
        return path

    def render(self, report: AuditReport) -> str:
        score = AccessibilityScore.from_report(report)
        lines: List[str] = [f"# {self.title}", ""]
        if report.url:
            lines.append(f"**URL**: {report.url}")
        if report.engine:
            lines.append(f"**Engine**: {report.engine.name} {report.engine.version or ''}".rstrip())
        lines.extend([f"**Accessibility Score**: {score.display}", "", "## Summary", ""])
        lines.append("| Category | Count |")
        lines.append("| --- | --- |")
        for category, count in report.counts().items():
            lines.append(f"| {category.label} | {count} |")

        for category in (Category.VIOLATIONS, Category.INCOMPLETE):
            items = report.items(category)
            lines.extend(["", f"## {category.label}", ""])
            if not items:
                lines.append(f"No results found for {category.label}.")
                continue
            for item in items:
                lines.extend(self._render_item(item))
        return "\n".join(lines) + "\n"

    def _render_item(self, item: ResultItem) -> List[str]:
        lines = [f"### {remove_hyphen(item.id).title()} ({item.impact})", "", item.description]
        if item.help_url:
            lines.append(f"More information: {item.help_url}")
        if item.tags:
            lines.append(f"Tags: {', '.join(item.tags)}")
        for node in item.nodes[: self.max_nodes]:
            lines.append(f"- `{', '.join(node.target)}`: `{node.html}`")
        if len(item.nodes) > self.max_nodes:
            lines.append(f"- ... and {len(item.nodes) - self.max_nodes} more")
        lines.append("")
        return lines


@dataclass
class PDFReportWriter:
    """Writes a compact PDF summary: score, category counts and violations."""

    title: str = "Accessibility Audit Report"

    def write(self, report: AuditReport, path: Path) -> Optional[Path]:
        path.parent.mkdir(parents=True, exist_ok=True)
        doc = SimpleDocTemplate(str(path), pagesize=A4)
        styles = getSampleStyleSheet()
        score = AccessibilityScore.from_report(report)

        elements = [Paragraph(self.title, styles["Title"]), Spacer(1, 12)]
        if report.url:
            elements.append(Paragraph(f"<b>URL</b>: {_escape(report.url)}", styles["Normal"]))
        elements.append(Paragraph(f"<b>Accessibility Score</b>: {score.display}", styles["Normal"]))
        elements.append(Spacer(1, 12))

        counts = [["Category", "Count"]] + [
            [category.label, str(count)] for category, count in report.counts().items()
        ]
        elements.append(self._table(counts, doc.width))
        elements.append(Spacer(1, 12))

        elements.append(Paragraph("Violations", styles["Heading1"]))
        if not report.violations:
            elements.append(Paragraph("No results found for Violations.", styles["Normal"]))
        else:
            rows = [["Rule", "Impact", "Description"]]
            for item in report.violations:
                rows.append([
                    Paragraph(_escape(remove_hyphen(item.id)), styles["BodyText"]),
                    item.impact or "",
                    Paragraph(_escape(item.description), styles["BodyText"]),
                ])
            elements.append(self._table(rows, doc.width, col_ratios=(0.3, 0.15, 0.55)))

        doc.build(elements)
        return path

    def _table(self, rows, doc_width: float, col_ratios=None) -> Table:
        num_cols = len(rows[0])
        ratios = col_ratios or [1.0 / num_cols] * num_cols
        table = Table(rows, colWidths=[doc_width * ratio for ratio in ratios], hAlign="LEFT")
        table.setStyle(TableStyle([
            ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#cccccc")),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#f1f5f9")),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ]))
        return table


def _escape(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
