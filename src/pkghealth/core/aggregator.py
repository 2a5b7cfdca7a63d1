"""
Vulnerability aggregation.

Merges findings from an audit-style source, registry deprecation notices,
and npms.io quality signals into one de-duplicated list of
:class:`Vulnerability` objects with normalized severities.
"""

import logging
from typing import Any, Iterable, Mapping, Optional

from pkghealth.core.models import (
    AuditAdvisory,
    AuditEntry,
    Manifest,
    PackageMetadata,
    QualitySignal,
    Severity,
    Vulnerability,
)
from pkghealth.core.versions import extract_concrete_version

logger = logging.getLogger(__name__)

_KNOWN_SEVERITIES = {
    "critical": Severity.CRITICAL,
    "high": Severity.HIGH,
    "moderate": Severity.MODERATE,
    "low": Severity.LOW,
}


def normalize_severity(value: Any) -> Severity:
    """Map a free-form severity onto the closed :class:`Severity` set.

    Only an exact (case-insensitive) match of critical, high, moderate or
    low is recognized; everything else, including None, is UNKNOWN.
    """
    if isinstance(value, Severity):
        return value
    if not isinstance(value, str):
        return Severity.UNKNOWN
    return _KNOWN_SEVERITIES.get(value.lower(), Severity.UNKNOWN)


class VulnerabilityAggregator:
    """Build a normalized vulnerability list from several sources."""

    NO_DESCRIPTION = "No description available"
    NO_FIX = "Check npm registry"
    UNKNOWN_RANGE = "unknown"

    QUALITY_CHECK_ID = "npms-quality-check"
    QUALITY_FLAG_ID = "npms-vulnerability-flag"
    QUALITY_FIX = "latest"
    LOW_SCORE_DESCRIPTION = "Low quality/maintenance score detected"
    FLAGGED_DESCRIPTION = "Package flagged with known vulnerabilities"

    # npms.io scores are in [0, 1]
    LOW_SCORE_THRESHOLD = 0.5
    VERY_LOW_QUALITY_THRESHOLD = 0.3

    def from_audit(self, audit: Mapping[str, AuditEntry]) -> list[Vulnerability]:
        """Convert audit entries into vulnerabilities.

        Every advisory carrying a source or a title yields one entry.
        Advisories without a source get a deterministic synthesized id.
        """
        vulnerabilities = []
        for package, entry in audit.items():
            for index, advisory in enumerate(entry.via):
                if not advisory.source and not advisory.title:
                    continue
                vulnerabilities.append(
                    Vulnerability(
                        id=advisory.source or f"vuln-{package}-{index}",
                        package=package,
                        affected_versions=advisory.range or self.UNKNOWN_RANGE,
                        severity=normalize_severity(advisory.severity),
                        description=advisory.title or self.NO_DESCRIPTION,
                        fixed_in=entry.fix_version or self.NO_FIX,
                    )
                )
        return vulnerabilities

    def deprecation_audit(
        self,
        manifest: Manifest,
        metadata: Mapping[str, Optional[PackageMetadata]],
    ) -> dict[str, AuditEntry]:
        """Turn registry deprecation notices into audit-style entries.

        A dependency whose concrete version is deprecated on the registry
        is reported as a moderate finding, fixed by the latest release.
        """
        entries = {}
        for name in manifest.package_names:
            meta = metadata.get(name)
            version_range = manifest.range_for(name)
            current = extract_concrete_version(version_range)
            if meta is None or current is None:
                continue

            message = meta.deprecation_for(current)
            if not message:
                continue

            entries[name] = AuditEntry(
                package=name,
                via=(
                    AuditAdvisory(
                        source=f"npm-deprecated-{name}",
                        title=message,
                        severity=Severity.MODERATE.value,
                        range=version_range,
                    ),
                ),
                fix_version=meta.latest_version or current,
            )
        return entries

    def from_quality(self, signal: QualitySignal, affected: str) -> list[Vulnerability]:
        """Infer findings from an npms.io quality signal.

        The low-score rule and the vulnerability-flag rule are independent;
        both can fire for the same package. A missing score never counts as
        low.
        """
        vulnerabilities = []
        quality = signal.quality
        maintenance = signal.maintenance

        low_quality = quality is not None and quality < self.LOW_SCORE_THRESHOLD
        low_maintenance = maintenance is not None and maintenance < self.LOW_SCORE_THRESHOLD
        if low_quality or low_maintenance:
            very_low = quality is not None and quality < self.VERY_LOW_QUALITY_THRESHOLD
            vulnerabilities.append(
                Vulnerability(
                    id=self.QUALITY_CHECK_ID,
                    package=signal.name,
                    affected_versions=affected,
                    severity=Severity.HIGH if very_low else Severity.MODERATE,
                    description=self.LOW_SCORE_DESCRIPTION,
                    fixed_in=self.QUALITY_FIX,
                )
            )

        if signal.has_vulnerabilities:
            vulnerabilities.append(
                Vulnerability(
                    id=self.QUALITY_FLAG_ID,
                    package=signal.name,
                    affected_versions=affected,
                    severity=Severity.HIGH,
                    description=self.FLAGGED_DESCRIPTION,
                    fixed_in=self.QUALITY_FIX,
                )
            )

        return vulnerabilities

    def aggregate(
        self,
        manifest: Manifest,
        audit: Mapping[str, AuditEntry],
        metadata: Mapping[str, Optional[PackageMetadata]],
        quality: Mapping[str, Optional[QualitySignal]],
    ) -> list[Vulnerability]:
        """Merge every source into one de-duplicated list.

        Order is audit findings, then deprecation findings, then quality
        findings, each in source order. Manifest packages with no registry
        data are excluded from every source.

        Args:
            manifest: The declared dependencies.
            audit: Audit entries keyed by package name.
            metadata: Registry metadata keyed by package name (None = fetch failed).
            quality: Quality signals keyed by package name (None = fetch failed).
        """
        missing = {name for name in manifest.package_names if metadata.get(name) is None}

        collected = self.from_audit(audit)
        collected.extend(self.from_audit(self.deprecation_audit(manifest, metadata)))
        for name in manifest.package_names:
            signal = quality.get(name)
            if signal is None:
                continue
            version_range = manifest.range_for(name) or ""
            affected = extract_concrete_version(version_range) or version_range
            collected.extend(self.from_quality(signal, affected))

        result = [v for v in self.deduplicate(collected) if v.package not in missing]
        if missing:
            logger.debug("Excluded vulnerabilities for packages without registry data: %s",
                         ", ".join(sorted(missing)))
        return result

    @staticmethod
    def deduplicate(vulnerabilities: Iterable[Vulnerability]) -> list[Vulnerability]:
        """Drop repeated (package, id) pairs, keeping the first occurrence."""
        seen = set()
        unique = []
        for vuln in vulnerabilities:
            if vuln.key in seen:
                continue
            seen.add(vuln.key)
            unique.append(vuln)
        return unique
