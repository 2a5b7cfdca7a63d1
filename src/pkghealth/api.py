"""
High-level programmatic API for pkghealth.

This module provides simple, async-friendly functions for common operations.
For more control, use the underlying classes directly.

Example:
    import asyncio
    from pkghealth import analyze, serialize

    async def main():
        manifest = {
            "dependencies": {"express": "^4.17.1"},
            "devDependencies": {"jest": "^27.0.0"},
        }
        report = await analyze(manifest)
        print(f"Health score: {report.health_score}")

        for entry in report.outdated:
            print(f"{entry.package}: {entry.current} -> {entry.latest}")

        with open("report.json", "wb") as f:
            f.write(serialize(report))

    asyncio.run(main())
"""

import asyncio
from pathlib import Path
from typing import Any, Mapping, Optional

from pkghealth.collectors.audit import AuditSource, build_audit_source
from pkghealth.config import Settings
from pkghealth.core.models import Report, Vulnerability
from pkghealth.reports.formatters import serialize
from pkghealth.reports.generator import ReportGenerator

AuditArgument = Optional[AuditSource | Mapping | Path | str]


def _generator(settings: Optional[Settings], audit: AuditArgument) -> ReportGenerator:
    settings = settings or Settings.from_env()
    if audit is None and settings.audit_project_dir:
        audit = settings.audit_project_dir
    return ReportGenerator(
        settings=settings,
        audit_source=build_audit_source(audit, timeout=settings.timeout),
    )


async def analyze(
    manifest: Any,
    *,
    settings: Optional[Settings] = None,
    audit: AuditArgument = None,
) -> Report:
    """Analyze a manifest and produce a health report.

    Args:
        manifest: A parsed package.json-style mapping (only
            ``dependencies`` and ``devDependencies`` are read) or a
            :class:`~pkghealth.core.models.Manifest`.
        settings: Endpoints and timeouts. Defaults to
            ``Settings.from_env()``.
        audit: Optional audit source: an ``AuditSource``, an already
            parsed ``npm audit --json`` document, or a project directory
            to run ``npm audit`` in.

    Returns:
        Report with outdated packages, vulnerabilities, summary counts
        and the health score.

    Raises:
        ReportGenerationError: If the manifest is structurally invalid.

    Example:
        >>> import asyncio
        >>> from pkghealth import analyze
        >>> report = asyncio.run(analyze({"dependencies": {"lodash": "4.17.20"}}))  # doctest: +SKIP
        >>> print(report.summary.outdated)  # doctest: +SKIP
    """
    return await _generator(settings, audit).generate(manifest)


async def analyze_vulnerabilities(
    manifest: Any,
    *,
    settings: Optional[Settings] = None,
    audit: AuditArgument = None,
) -> list[Vulnerability]:
    """Collect the vulnerabilities of a manifest without scoring it.

    Takes the same arguments as :func:`analyze`.

    Example:
        >>> import asyncio
        >>> from pkghealth import analyze_vulnerabilities
        >>> vulns = asyncio.run(analyze_vulnerabilities({"dependencies": {"request": "^2.88.0"}}))  # doctest: +SKIP
        >>> print([v.id for v in vulns])  # doctest: +SKIP
    """
    return await _generator(settings, audit).generate_vulnerabilities(manifest)


def analyze_sync(
    manifest: Any,
    *,
    settings: Optional[Settings] = None,
    audit: AuditArgument = None,
) -> Report:
    """Synchronous wrapper for analyze().

    For use in non-async contexts. Runs a fresh event loop.

    Example:
        >>> from pkghealth import analyze_sync
        >>> report = analyze_sync({"dependencies": {"express": "^4.17.1"}})  # doctest: +SKIP
        >>> print(report.health_score)  # doctest: +SKIP
    """
    return asyncio.run(analyze(manifest, settings=settings, audit=audit))


__all__ = [
    "analyze",
    "analyze_sync",
    "analyze_vulnerabilities",
    "serialize",
]
