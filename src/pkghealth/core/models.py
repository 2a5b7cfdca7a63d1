"""
Core data models for pkghealth.

This module defines the data structures used throughout pkghealth for
representing manifests, fetched package metadata, outdated entries,
vulnerabilities, and the final report. External payloads are decoded
into these types at exactly one place per source (the ``from_*``
constructors), field by field with explicit defaults.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Mapping, Optional, TypeVar

from pkghealth.core.exceptions import ManifestError

T = TypeVar("T")


class HealthGrade(Enum):
    """Letter grades for dependency health."""

    A = "A"  # Excellent (90-100)
    B = "B"  # Good (80-89)
    C = "C"  # Acceptable (70-79)
    D = "D"  # Concerning (60-69)
    F = "F"  # Critical (<60)

    def __str__(self) -> str:
        return self.value


class BumpType(Enum):
    """How far a newer release has advanced past the current version."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"

    def __str__(self) -> str:
        return self.value

    @property
    def sort_order(self) -> int:
        """Return sort order (lower = bigger jump)."""
        order = {
            BumpType.MAJOR: 0,
            BumpType.MINOR: 1,
            BumpType.PATCH: 2,
        }
        return order[self]


class Severity(Enum):
    """Closed set of vulnerability severities."""

    CRITICAL = "critical"
    HIGH = "high"
    MODERATE = "moderate"
    LOW = "low"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value

    @property
    def sort_order(self) -> int:
        """Return sort order (lower = more severe)."""
        order = {
            Severity.CRITICAL: 0,
            Severity.HIGH: 1,
            Severity.MODERATE: 2,
            Severity.LOW: 3,
            Severity.UNKNOWN: 4,
        }
        return order[self]


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def _as_score(value: Any) -> float | None:
    # bool is an int subclass; a flag is not a score
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


@dataclass(frozen=True)
class Manifest:
    """The declared dependencies of a project."""

    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "Manifest":
        """Build a manifest from a parsed package.json-style mapping.

        Raises:
            ManifestError: If ``data`` or either dependency section is not
                a mapping of package name to version-range string.
        """
        if isinstance(data, Manifest):
            return data
        if not isinstance(data, Mapping):
            raise ManifestError(f"expected a mapping, got {type(data).__name__}")

        return cls(
            dependencies=cls._read_section(data, "dependencies"),
            dev_dependencies=cls._read_section(data, "devDependencies"),
        )

    @staticmethod
    def _read_section(data: Mapping, key: str) -> dict[str, str]:
        section = data.get(key)
        if section is None:
            return {}
        if not isinstance(section, Mapping):
            raise ManifestError(f"'{key}' must be a mapping, got {type(section).__name__}")

        result = {}
        for name, version_range in section.items():
            if not isinstance(name, str) or not name:
                raise ManifestError(f"'{key}' contains an invalid package name: {name!r}")
            if not isinstance(version_range, str):
                raise ManifestError(
                    f"'{key}.{name}' must be a version range string, "
                    f"got {type(version_range).__name__}"
                )
            result[name] = version_range
        return result

    @property
    def package_names(self) -> list[str]:
        """Distinct package names across both sections, in first-seen order."""
        return list(dict.fromkeys([*self.dependencies, *self.dev_dependencies]))

    def range_for(self, name: str) -> str | None:
        """Return the declared range for ``name``.

        A name listed in both sections resolves to its ``devDependencies``
        range, matching a ``{...dependencies, ...devDependencies}`` merge.
        """
        if name in self.dev_dependencies:
            return self.dev_dependencies[name]
        return self.dependencies.get(name)

    def to_dict(self) -> dict:
        return {
            "dependencies": dict(self.dependencies),
            "devDependencies": dict(self.dev_dependencies),
        }


@dataclass(frozen=True)
class FetchOutcome(Generic[T]):
    """Result of a single per-package fetch.

    A failed fetch is not an exception: it is an outcome with no value
    and the error text, so callers can see which packages have no data.
    """

    package: str
    value: Optional[T] = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.value is not None

    @classmethod
    def success(cls, package: str, value: T) -> "FetchOutcome[T]":
        return cls(package=package, value=value)

    @classmethod
    def absent(cls, package: str, error: str) -> "FetchOutcome[T]":
        return cls(package=package, error=error)


@dataclass(frozen=True)
class VersionInfo:
    """Per-version registry data the engine cares about."""

    deprecated: str | None = None


@dataclass(frozen=True)
class PackageMetadata:
    """Metadata retrieved from the npm registry."""

    name: str
    latest_version: str | None = None
    deprecated_message: str | None = None
    versions: dict[str, VersionInfo] = field(default_factory=dict)

    @classmethod
    def from_registry(cls, name: str, data: Any) -> "PackageMetadata":
        """Decode a registry document. Unexpected shapes degrade to empty fields."""
        data = _as_dict(data)
        latest = _as_str(_as_dict(data.get("dist-tags")).get("latest"))

        versions = {}
        for version, info in _as_dict(data.get("versions")).items():
            versions[version] = VersionInfo(deprecated=_as_str(_as_dict(info).get("deprecated")))

        deprecated_message = None
        if latest and latest in versions:
            deprecated_message = versions[latest].deprecated

        return cls(
            name=name,
            latest_version=latest,
            deprecated_message=deprecated_message,
            versions=versions,
        )

    @property
    def is_deprecated(self) -> bool:
        return self.deprecated_message is not None

    def deprecation_for(self, version: str) -> str | None:
        """Return the deprecation notice of a specific version, if any."""
        info = self.versions.get(version)
        return info.deprecated if info else None


@dataclass(frozen=True)
class QualitySignal:
    """Secondary quality and maintenance data from npms.io."""

    name: str
    quality: float | None = None
    maintenance: float | None = None
    has_vulnerabilities: bool = False

    @classmethod
    def from_npms(cls, name: str, data: Any) -> "QualitySignal":
        """Decode an npms.io package document."""
        data = _as_dict(data)
        detail = _as_dict(_as_dict(data.get("score")).get("detail"))
        metadata = _as_dict(_as_dict(data.get("collected")).get("metadata"))

        return cls(
            name=name,
            quality=_as_score(detail.get("quality")),
            maintenance=_as_score(detail.get("maintenance")),
            has_vulnerabilities=metadata.get("hasVulnerabilities") is True,
        )


@dataclass(frozen=True)
class AuditAdvisory:
    """One element of an audit entry's ``via`` list."""

    source: str | None = None
    title: str | None = None
    severity: str | None = None
    range: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "AuditAdvisory":
        source = data.get("source")
        # npm audit uses numeric advisory ids
        if isinstance(source, (int, float)) and not isinstance(source, bool):
            source = str(source)
        return cls(
            source=_as_str(source),
            title=_as_str(data.get("title")),
            severity=data.get("severity") if isinstance(data.get("severity"), str) else None,
            range=_as_str(data.get("range")),
        )


@dataclass(frozen=True)
class AuditEntry:
    """Audit findings for one package."""

    package: str
    via: tuple[AuditAdvisory, ...] = ()
    fix_version: str | None = None

    @classmethod
    def from_dict(cls, package: str, data: Any) -> "AuditEntry":
        """Decode one value of an ``npm audit --json`` ``vulnerabilities`` object.

        ``via`` elements that are plain strings (references to other
        vulnerable packages) are skipped. ``fixAvailable`` may be an object
        or a boolean; only an object carries a version.
        """
        data = _as_dict(data)
        via = data.get("via")
        advisories = tuple(
            AuditAdvisory.from_dict(item)
            for item in (via if isinstance(via, list) else [])
            if isinstance(item, dict)
        )
        fix = data.get("fixAvailable")
        fix_version = _as_str(fix.get("version")) if isinstance(fix, dict) else None
        return cls(package=package, via=advisories, fix_version=fix_version)


def parse_audit_report(data: Any) -> dict[str, AuditEntry]:
    """Decode an audit payload into entries keyed by package name.

    Accepts either the full ``npm audit --json`` document (with a
    ``vulnerabilities`` key) or the bare package mapping.
    """
    data = _as_dict(data)
    if "vulnerabilities" in data:
        data = _as_dict(data["vulnerabilities"])
    return {
        name: AuditEntry.from_dict(name, entry)
        for name, entry in data.items()
        if isinstance(name, str)
    }


@dataclass(frozen=True)
class OutdatedEntry:
    """A dependency whose concrete version lags the registry's latest."""

    package: str
    current: str
    latest: str
    bump_type: BumpType

    def __str__(self) -> str:
        return f"{self.package}: {self.current} -> {self.latest} ({self.bump_type})"

    def to_dict(self) -> dict:
        return {
            "package": self.package,
            "current": self.current,
            "latest": self.latest,
            "type": self.bump_type.value,
        }


@dataclass(frozen=True)
class Vulnerability:
    """Normalized vulnerability information."""

    id: str
    package: str
    affected_versions: str
    severity: Severity
    description: str
    fixed_in: str

    def __str__(self) -> str:
        return f"{self.id} ({self.severity}): {self.package} - {self.description}"

    @property
    def key(self) -> tuple[str, str]:
        """Identity used for de-duplication."""
        return (self.package, self.id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "package": self.package,
            "version": self.affected_versions,
            "severity": self.severity.value,
            "description": self.description,
            "fixedIn": self.fixed_in,
        }


@dataclass(frozen=True)
class Summary:
    """Counts derived from a report's outdated and vulnerability lists."""

    critical: int = 0
    high: int = 0
    moderate: int = 0
    low: int = 0
    unknown: int = 0
    outdated: int = 0
    total_deps: int = 0
    total_dev_deps: int = 0

    @classmethod
    def compute(
        cls,
        manifest: Manifest,
        outdated: list[OutdatedEntry] | tuple[OutdatedEntry, ...],
        vulnerabilities: list[Vulnerability] | tuple[Vulnerability, ...],
    ) -> "Summary":
        counts = {severity: 0 for severity in Severity}
        for vuln in vulnerabilities:
            counts[vuln.severity] += 1

        return cls(
            critical=counts[Severity.CRITICAL],
            high=counts[Severity.HIGH],
            moderate=counts[Severity.MODERATE],
            low=counts[Severity.LOW],
            unknown=counts[Severity.UNKNOWN],
            outdated=len(outdated),
            total_deps=len(manifest.dependencies),
            total_dev_deps=len(manifest.dev_dependencies),
        )

    @property
    def total_vulnerabilities(self) -> int:
        return self.critical + self.high + self.moderate + self.low + self.unknown

    def to_dict(self) -> dict:
        return {
            "critical": self.critical,
            "high": self.high,
            "moderate": self.moderate,
            "low": self.low,
            "unknown": self.unknown,
            "outdated": self.outdated,
            "totalDeps": self.total_deps,
            "totalDevDeps": self.total_dev_deps,
        }


@dataclass(frozen=True)
class Report:
    """Complete dependency health report for one manifest."""

    dependencies: dict[str, str]
    dev_dependencies: dict[str, str]
    outdated: tuple[OutdatedEntry, ...]
    vulnerabilities: tuple[Vulnerability, ...]
    summary: Summary
    total_dependencies: int
    health_score: int

    def __str__(self) -> str:
        return (
            f"health {self.health_score}/100, "
            f"{self.summary.outdated} outdated, "
            f"{self.summary.total_vulnerabilities} vulnerabilities"
        )

    def vulnerabilities_at_or_above(self, severity: Severity) -> list[Vulnerability]:
        """Return vulnerabilities at least as severe as ``severity``."""
        return [v for v in self.vulnerabilities if v.severity.sort_order <= severity.sort_order]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "dependencies": dict(self.dependencies),
            "devDependencies": dict(self.dev_dependencies),
            "healthScore": self.health_score,
            "outdated": [entry.to_dict() for entry in self.outdated],
            "summary": self.summary.to_dict(),
            "totalDependencies": self.total_dependencies,
            "vulnerabilities": [vuln.to_dict() for vuln in self.vulnerabilities],
        }
