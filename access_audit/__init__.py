"""Accessibility audit service and reporting engine."""

__version__ = "1.0.0"

from .models import AuditReport, Category, ResultItem  # noqa: E402
from .pipeline import AuditService  # noqa: E402

__all__ = ["AuditReport", "AuditService", "Category", "ResultItem", "__version__"]
