"""
Rich terminal output helpers for CLI.

Provides functions for printing tables, reports, and formatted
output using the Rich library.
"""

import logging

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from pkghealth.core.calculator import HealthCalculator
from pkghealth.core.models import (
    BumpType,
    HealthGrade,
    OutdatedEntry,
    Report,
    Severity,
    Vulnerability,
)

# Console instance for all output
console = Console()

# Log records go to stderr so they never mix with JSON on stdout
error_console = Console(stderr=True)


def configure_logging(verbose: bool = False, level: str = "WARNING") -> None:
    """Route pkghealth log records through a Rich handler on stderr.

    Args:
        verbose: Log at DEBUG regardless of ``level``.
        level: Level name used when not verbose.
    """
    log_level = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.WARNING)

    logger = logging.getLogger("pkghealth")
    # Repeated invocations in one process replace the handler
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(console=error_console, show_path=verbose)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)
    logger.setLevel(log_level)


def get_grade_style(grade: HealthGrade) -> str:
    """Get Rich style string for a health grade."""
    styles = {
        HealthGrade.A: "bold green",
        HealthGrade.B: "green",
        HealthGrade.C: "yellow",
        HealthGrade.D: "red",
        HealthGrade.F: "bold red",
    }
    return styles.get(grade, "white")


def get_severity_style(severity: Severity) -> str:
    """Get Rich style string for a vulnerability severity."""
    styles = {
        Severity.CRITICAL: "bold red",
        Severity.HIGH: "red",
        Severity.MODERATE: "yellow",
        Severity.LOW: "cyan",
        Severity.UNKNOWN: "dim",
    }
    return styles.get(severity, "white")


def get_bump_style(bump_type: BumpType) -> str:
    """Get Rich style string for a bump type."""
    styles = {
        BumpType.MAJOR: "red",
        BumpType.MINOR: "yellow",
        BumpType.PATCH: "green",
    }
    return styles.get(bump_type, "white")


def print_report(report: Report) -> None:
    """Print a full health report: score panel, outdated and vulnerability tables.

    Args:
        report: The Report to display.
    """
    grade = HealthCalculator.score_to_grade(report.health_score)
    grade_style = get_grade_style(grade)
    summary = report.summary

    console.print()
    console.print(
        Panel(
            f"[{grade_style}]{report.health_score}[/] / 100",
            title="Dependency Health",
            subtitle=f"Grade: [{grade_style}]{grade.value}[/]",
        )
    )

    if report.outdated:
        print_outdated(list(report.outdated))
    if report.vulnerabilities:
        print_vulnerabilities(list(report.vulnerabilities))

    console.print()
    console.print(
        f"[bold]Summary:[/] {summary.total_deps} dependencies, "
        f"{summary.total_dev_deps} dev dependencies"
    )
    console.print(f"  [yellow]Outdated:[/] {summary.outdated}")
    print_severity_counts(list(report.vulnerabilities))


def print_outdated(entries: list[OutdatedEntry]) -> None:
    """Print a table of outdated packages.

    Args:
        entries: Outdated entries, in the order they should be shown.
    """
    table = Table(
        title="Outdated Packages",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold cyan",
    )

    table.add_column("Package", style="cyan", no_wrap=True)
    table.add_column("Current", style="dim")
    table.add_column("Latest")
    table.add_column("Type", justify="center")

    for entry in entries:
        table.add_row(
            entry.package,
            entry.current,
            entry.latest,
            Text(entry.bump_type.value, style=get_bump_style(entry.bump_type)),
        )

    console.print()
    console.print(table)


def print_vulnerabilities(vulnerabilities: list[Vulnerability]) -> None:
    """Print a table of vulnerabilities.

    Args:
        vulnerabilities: Vulnerabilities to display.
    """
    table = Table(
        title="Vulnerabilities",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold cyan",
    )

    table.add_column("Package", style="cyan", no_wrap=True)
    table.add_column("ID")
    table.add_column("Severity", justify="center")
    table.add_column("Affected", style="dim")
    table.add_column("Fixed In")
    table.add_column("Description")

    for vuln in vulnerabilities:
        description = vuln.description
        table.add_row(
            vuln.package,
            vuln.id,
            Text(vuln.severity.value, style=get_severity_style(vuln.severity)),
            vuln.affected_versions,
            vuln.fixed_in,
            description[:60] + "..." if len(description) > 60 else description,
        )

    console.print()
    console.print(table)


def print_severity_counts(vulnerabilities: list[Vulnerability]) -> None:
    """Print how many vulnerabilities fall in each severity."""
    console.print(f"  [bold]Vulnerabilities:[/] {len(vulnerabilities)}")
    for severity in Severity:
        count = sum(1 for v in vulnerabilities if v.severity == severity)
        if count:
            style = get_severity_style(severity)
            console.print(f"    [{style}]{severity.value}:[/] {count}")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]Success:[/] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[bold yellow]Warning:[/] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[cyan]Info:[/] {message}")
