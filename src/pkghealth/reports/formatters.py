"""
Report formatters.

``serialize`` is the canonical byte encoding of a Report: the same report
always produces the same bytes. The other formatters are human-facing
renderings built on the same data.
"""

import json
from abc import ABC, abstractmethod

from pkghealth.core.calculator import HealthCalculator
from pkghealth.core.models import Report, Severity


def serialize(report: Report) -> bytes:
    """Encode a report as canonical JSON.

    Keys are sorted, indentation is two spaces, and the output is UTF-8
    with a trailing newline.
    """
    text = json.dumps(report.to_dict(), indent=2, sort_keys=True, ensure_ascii=False)
    return (text + "\n").encode("utf-8")


class Formatter(ABC):
    """Base class for report formatters."""

    @abstractmethod
    def format(self, report: Report) -> str:
        """Render a report as text."""
        pass


class JSONFormatter(Formatter):
    """Canonical JSON output."""

    def format(self, report: Report) -> str:
        return serialize(report).decode("utf-8")


class MarkdownFormatter(Formatter):
    """Markdown output suitable for pull request comments."""

    def format(self, report: Report) -> str:
        grade = HealthCalculator.score_to_grade(report.health_score)
        summary = report.summary

        lines = [
            "# Dependency Health Report",
            "",
            f"**Health score:** {report.health_score}/100 (grade {grade})",
            "",
            "## Summary",
            "",
            "| Metric | Count |",
            "|--------|-------|",
            f"| Dependencies | {summary.total_deps} |",
            f"| Dev dependencies | {summary.total_dev_deps} |",
            f"| Outdated | {summary.outdated} |",
        ]
        for severity in Severity:
            lines.append(f"| {severity.value.capitalize()} vulnerabilities | {getattr(summary, severity.value)} |")

        lines.extend(["", "## Outdated Packages", ""])
        if report.outdated:
            lines.extend([
                "| Package | Current | Latest | Type |",
                "|---------|---------|--------|------|",
            ])
            for entry in report.outdated:
                lines.append(
                    f"| {entry.package} | {entry.current} | {entry.latest} | {entry.bump_type} |"
                )
        else:
            lines.append("All packages are up to date.")

        lines.extend(["", "## Vulnerabilities", ""])
        if report.vulnerabilities:
            lines.extend([
                "| Package | ID | Severity | Affected | Fixed In | Description |",
                "|---------|----|----------|----------|----------|-------------|",
            ])
            for vuln in report.vulnerabilities:
                lines.append(
                    f"| {vuln.package} | {vuln.id} | {vuln.severity} | "
                    f"{vuln.affected_versions} | {vuln.fixed_in} | "
                    f"{_escape_cell(vuln.description)} |"
                )
        else:
            lines.append("No vulnerabilities found.")

        return "\n".join(lines) + "\n"


class TableFormatter(Formatter):
    """Plain-text table output."""

    def format(self, report: Report) -> str:
        grade = HealthCalculator.score_to_grade(report.health_score)
        summary = report.summary

        lines = [
            f"Health score: {report.health_score}/100 ({grade})",
            f"Dependencies: {summary.total_deps} (+{summary.total_dev_deps} dev)",
            f"Outdated: {summary.outdated}  "
            f"Vulnerabilities: {summary.total_vulnerabilities} "
            f"(critical {summary.critical}, high {summary.high}, "
            f"moderate {summary.moderate}, low {summary.low}, unknown {summary.unknown})",
        ]

        if report.outdated:
            rows = [(e.package, e.current, e.latest, str(e.bump_type)) for e in report.outdated]
            lines.append("")
            lines.extend(_render_table(("Package", "Current", "Latest", "Type"), rows))

        if report.vulnerabilities:
            rows = [
                (v.package, v.id, str(v.severity), v.fixed_in)
                for v in report.vulnerabilities
            ]
            lines.append("")
            lines.extend(_render_table(("Package", "ID", "Severity", "Fixed In"), rows))

        return "\n".join(lines) + "\n"


def _escape_cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


def _render_table(headers: tuple[str, ...], rows: list[tuple[str, ...]]) -> list[str]:
    widths = [len(h) for h in headers]
    for row in rows:
        widths = [max(w, len(cell)) for w, cell in zip(widths, row)]

    def line(cells: tuple[str, ...]) -> str:
        return "  ".join(cell.ljust(w) for cell, w in zip(cells, widths)).rstrip()

    return [line(headers), line(tuple("-" * w for w in widths))] + [line(row) for row in rows]
