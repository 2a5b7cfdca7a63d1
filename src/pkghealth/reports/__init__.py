"""
Report generation module.

Provides the report generator and formatters for outputting health reports
in various formats including canonical JSON, Markdown, and plain tables.
"""

from pkghealth.reports.formatters import (
    Formatter,
    JSONFormatter,
    MarkdownFormatter,
    TableFormatter,
    serialize,
)
from pkghealth.reports.generator import ReportGenerator

__all__ = [
    "ReportGenerator",
    "Formatter",
    "JSONFormatter",
    "MarkdownFormatter",
    "TableFormatter",
    "serialize",
]
