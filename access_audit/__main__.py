"""Command-line interface for the accessibility audit service."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import get_settings
from .errors import AuditError
from .logging import setup_logging
from .models import Category
from .reporting import JSONReportWriter, MarkdownReportWriter, PDFReportWriter
from .scoring import AccessibilityScore


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Accessibility audit service")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP audit service")
    serve.add_argument("--host", default=None, help="Interface to bind (default from settings)")
    serve.add_argument("--port", type=int, default=None, help="Port to bind (default from settings)")

    audit = subparsers.add_parser("audit", help="Audit one URL locally")
    audit.add_argument("url", help="Absolute http(s) URL to audit")
    audit.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory to store audit.json, audit_report.md and audit.pdf",
    )
    return parser.parse_args(argv)


def run_audit(url: str, output_dir: Path = None) -> int:
    from .server import build_audit_service

    settings = get_settings()
    setup_logging(settings.log_level, json_output=False)
    service = build_audit_service(settings)
    try:
        report = service.run(url)
    except AuditError as exc:
        print(f"Audit failed [{exc.code}]: {exc.message}", file=sys.stderr)
        return 1
    finally:
        service.close()

    score = AccessibilityScore.from_report(report)
    print(f"Accessibility Score: {score.display}")
    for category in Category:
        print(f"{category.label}: {len(report.items(category))}")

    if output_dir is not None:
        JSONReportWriter().write(report, output_dir / "audit.json")
        MarkdownReportWriter().write(report, output_dir / "audit_report.md")
        PDFReportWriter().write(report, output_dir / "audit.pdf")
        print(f"Artifacts written to {output_dir.resolve()}")
    return 0


def main(argv=None) -> int:
    args = parse_args(argv)
    if args.command == "serve":
        import uvicorn

        from .server import create_app

        settings = get_settings()
        uvicorn.run(
            create_app(settings=settings),
            host=args.host or settings.host,
            port=args.port or settings.port,
        )
        return 0
    return run_audit(args.url, args.output_dir)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
