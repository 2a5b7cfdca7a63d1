"""
pkghealth

A health assessment engine for npm-style dependency manifests. Checks
declared dependencies against the npm registry, npms.io quality signals
and an optional ``npm audit`` report, then reduces outdated packages and
vulnerabilities into a single score out of 100.

Quick Start:
    >>> import asyncio
    >>> from pkghealth import analyze
    >>> report = asyncio.run(analyze({"dependencies": {"express": "^4.17.1"}}))  # doctest: +SKIP
    >>> print(report.health_score)  # doctest: +SKIP

    # Or use synchronous API:
    >>> from pkghealth import analyze_sync, serialize
    >>> report = analyze_sync({"dependencies": {"lodash": "4.17.20"}})  # doctest: +SKIP
    >>> data = serialize(report)  # doctest: +SKIP
"""

__version__ = "0.1.0"

# High-level API (recommended for most users)
from pkghealth.api import (
    analyze,
    analyze_sync,
    analyze_vulnerabilities,
    serialize,
)

# Core components (for advanced usage)
from pkghealth.config import Settings
from pkghealth.core.calculator import HealthCalculator

# Exceptions
from pkghealth.core.exceptions import (
    AuditError,
    ManifestError,
    NetworkError,
    PackageNotFoundError,
    PkgHealthError,
    RateLimitError,
    ReportGenerationError,
    ValidationError,
)

# Data models
from pkghealth.core.models import (
    BumpType,
    HealthGrade,
    Manifest,
    OutdatedEntry,
    Report,
    Severity,
    Summary,
    Vulnerability,
)
from pkghealth.reports.generator import ReportGenerator

__all__ = [
    # Version
    "__version__",
    # High-level API
    "analyze",
    "analyze_sync",
    "analyze_vulnerabilities",
    "serialize",
    # Models
    "BumpType",
    "HealthGrade",
    "Manifest",
    "OutdatedEntry",
    "Report",
    "Severity",
    "Summary",
    "Vulnerability",
    # Core
    "HealthCalculator",
    "ReportGenerator",
    "Settings",
    # Exceptions
    "PkgHealthError",
    "PackageNotFoundError",
    "RateLimitError",
    "NetworkError",
    "ValidationError",
    "ManifestError",
    "AuditError",
    "ReportGenerationError",
]
