"""
Core module for pkghealth.

Contains data models, version and range handling, the outdated
classifier, the vulnerability aggregator, the health calculator, and
exceptions.
"""

from pkghealth.core.aggregator import VulnerabilityAggregator, normalize_severity
from pkghealth.core.calculator import HealthCalculator
from pkghealth.core.classifier import OutdatedClassifier
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
from pkghealth.core.models import (
    AuditAdvisory,
    AuditEntry,
    BumpType,
    FetchOutcome,
    HealthGrade,
    Manifest,
    OutdatedEntry,
    PackageMetadata,
    QualitySignal,
    Report,
    Severity,
    Summary,
    Vulnerability,
)

__all__ = [
    # Models
    "AuditAdvisory",
    "AuditEntry",
    "BumpType",
    "FetchOutcome",
    "HealthGrade",
    "Manifest",
    "OutdatedEntry",
    "PackageMetadata",
    "QualitySignal",
    "Report",
    "Severity",
    "Summary",
    "Vulnerability",
    # Core
    "HealthCalculator",
    "OutdatedClassifier",
    "VulnerabilityAggregator",
    "normalize_severity",
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
